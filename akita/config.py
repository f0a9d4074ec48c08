"""
Akita client configuration.

The configuration is an explicit object injected into the paste client; it is
never read ad hoc by the handlers. Config.load() derives the file location from
$HOME unless a path is given.

File format ($HOME/.akita.conf)
    provider = https://del.dog
    creds = <user>;<api key>

- one "key = value" entry per line; blank lines are skipped.
- an unknown key makes the whole file fall back to the defaults.
- a missing file yields the defaults, still bound to the path so save() creates it.
"""
import collections
import logging
import os
import os.path

from .utils import *

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "https://del.dog"
FILENAME = ".akita.conf"

Credentials = collections.namedtuple("Credentials", ("user", "api_key"))
Credentials.__doc__ = "paste-service account used to sign uploads"


class ConfigError(Exception):
    """
    configuration cannot be located, read or understood.
    """


class Config(metaclass=SpecType):
    """
    Paste client configuration.

    Attributes
    - provider: base URL (or bare host) of the paste service.
    - credentials: Credentials | None.
    - path: file backing this configuration (None for in-memory configs).
    """

    __introspectable__ = ()

    __displayable__ = (
        "provider",
        "credentials",
        "path",
    )

    def __init__(self, provider=DEFAULT_PROVIDER, credentials=None, path=None):
        self.provider = provider
        self.credentials = credentials
        self.path = path

    @property
    def url(self):
        """
        Provider as an absolute URL without trailing slash.
        """
        provider = self.provider.strip().rstrip("/")
        if not provider.startswith(("http://", "https://")):
            provider = "https://" + provider
        return provider

    @staticmethod
    def locate(environ=Unset):
        """
        Return the default configuration path derived from HOME.
        """
        environ = coalesce(environ, os.environ)
        try:
            return os.path.join(environ["HOME"], FILENAME)
        except KeyError:
            raise ConfigError("couldn't get HOME environment variable") from None

    @classmethod
    def load(cls, path=Unset):
        """
        Read the configuration file.

        Parameters
        - path: Unset | str
          File to read; defaults to Config.locate().

        Raises
        - ConfigError: HOME is unset, the file cannot be read, or a creds entry
          is malformed.
        """
        if path is Unset:
            path = cls.locate()
        try:
            with open(path, encoding="utf-8") as file:
                lines = file.read().splitlines()
        except FileNotFoundError:
            logger.debug("no configuration at %s; using defaults", path)
            return cls(path=path)
        except OSError as error:
            raise ConfigError(f"unable to read {path}: {error.strerror or error}") from error

        config = cls(path=path)
        for number, line in enumerate(lines, 1):
            if not line.strip():
                continue
            key, separator, value = line.partition(" = ")
            match key.strip() if separator else None:
                case "provider":
                    config.provider = value.strip()
                case "creds":
                    user, separator, api_key = value.strip().partition(";")
                    if not separator:
                        raise ConfigError(f"{path}:{number}: creds must be written as <user>;<api key>")
                    config.credentials = Credentials(user, api_key)
                case _:
                    logger.warning("%s:%d: unrecognized entry %r; falling back to defaults", path, number, line)
                    return cls(path=path)
        return config

    def dumps(self):
        """
        Serialize to the file format.
        """
        lines = ["provider = %s" % self.provider]
        if self.credentials is not None:
            lines.append("creds = %s;%s" % (self.credentials.user, self.credentials.api_key))
        return "".join(line + "\n" for line in lines)

    def save(self):
        """
        Write the configuration back to its path (no-op for in-memory configs).
        """
        if self.path is None:
            logger.debug("configuration has no path; nothing saved")
            return
        try:
            with open(self.path, "w", encoding="utf-8") as file:
                file.write(self.dumps())
        except OSError as error:
            raise ConfigError(f"unable to write {self.path}: {error.strerror or error}") from error
        logger.debug("configuration saved to %s", self.path)


__all__ = (
    "DEFAULT_PROVIDER",
    "Credentials",
    "ConfigError",
    "Config",
)
