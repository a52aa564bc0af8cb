class AuthorityCliError(Exception):
    pass


class ConfigurationError(AuthorityCliError):
    def __init__(self, message, fields=()):
        super().__init__(message)
        self.fields = tuple(fields)


class SubprocessExecutionError(AuthorityCliError):
    """The solana CLI could not be run, timed out, or exited non-zero."""

    def __init__(self, message, returncode=None, stdout="", stderr=""):
        super().__init__(message)
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""


class ProgramAccountError(AuthorityCliError):
    pass
