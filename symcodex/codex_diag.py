class CodexError(Exception):
    def __init__(self, code, msg, line=None, file=None):
        super().__init__(msg)
        self.code = code
        self.msg = msg
        self.line = line
        self.file = file

    def at(self, line=None, file=None) -> 'CodexError':
        """Fill in the source location if it is not known yet."""
        if self.line is None:
            self.line = line
        if self.file is None:
            self.file = file
        return self

    def __str__(self):
        if self.line is None:
            return self.msg
        return f"{self.file or '<source>'}:{self.line}: {self.msg}"

E_INVALID_IDENTIFIER = 1
E_INVALID_ESCAPE = 2
E_UNTERMINATED_ESCAPE = 3
E_INVALID_CODEPOINT = 4
E_MISSING_VALUE = 5
E_MISSING_DEPRECATION_MESSAGE = 6
E_DANGLING_DEPRECATION = 7
E_DUPLICATE_DEPRECATION = 8
E_MALFORMED_MODIFIER_ANNOTATION = 9
E_UNEXPECTED_DECLARATION = 10
E_ALIAS_TO_NONEXISTENT_SYMBOL = 11
E_ALIAS_TO_NONEXISTENT_VARIANT = 12
E_ALIAS_TO_ALIAS = 13
E_DUPLICATE_MODIFIER = 14
E_DUPLICATE_DEFINITION = 15
E_SOURCE_IO = 16
E_EXPORT_IO = 17
E_CACHE_IO = 18
E_CLI_USAGE = 19
