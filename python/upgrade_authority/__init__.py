from .cli_state import CLI_VERSION

__version__ = CLI_VERSION
__all__ = ["__version__"]
