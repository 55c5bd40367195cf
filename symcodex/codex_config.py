import logging
import os
from dataclasses import dataclass

@dataclass
class CodexConfig:
    """Runtime settings for compiling and caching corpora."""
    cache_dir: str
    use_cache: bool
    log_level: int

    @classmethod
    def default(cls) -> 'CodexConfig':
        return cls(
            cache_dir=os.path.expanduser("~/.cache/symcodex"),
            use_cache=True,
            log_level=logging.WARNING,
        )

    @classmethod
    def from_env(cls, environ=None) -> 'CodexConfig':
        """Override the defaults from SYMCODEX_* environment variables."""
        env = os.environ if environ is None else environ
        config = cls.default()
        if env.get('SYMCODEX_CACHE_DIR'):
            config.cache_dir = os.path.expanduser(env['SYMCODEX_CACHE_DIR'])
        if env.get('SYMCODEX_NO_CACHE', '').lower() in ('1', 'true', 'yes'):
            config.use_cache = False
        level = env.get('SYMCODEX_LOG_LEVEL')
        if level:
            config.log_level = logging.getLevelName(level.upper()) if not level.isdigit() else int(level)
            if not isinstance(config.log_level, int):
                config.log_level = logging.WARNING
        return config
