"""Allow ``python -m telecine``."""

from telecine.main import cli


cli()
