import json
import logging
import os

"""
Configuration for the discoverer defaults: a config file with named
sections, environment variables on top, explicit arguments on top of that.

A config file looks like this (JSON, or YAML if pyyaml is installed):

    {
        "default": {"timeout": 5, "secure_only": true},
        "contacts": {"inherits": "default", "check_caldav": false}
    }
"""

from davdiscovery.discovery import ServiceDiscoverer
from davdiscovery.lib.error import ConfigurationError

log = logging.getLogger(__name__)

CONFIG_KEYS = (
    "timeout",
    "secure_only",
    "check_caldav",
    "check_carddav",
    "poll_interval",
    "require_same_domain",
)

## Environmental variables for the discoverer defaults.
ENV_KEYS = {
    "DAVDISCOVERY_TIMEOUT": "timeout",
    "DAVDISCOVERY_SECURE_ONLY": "secure_only",
    "DAVDISCOVERY_CHECK_CALDAV": "check_caldav",
    "DAVDISCOVERY_CHECK_CARDDAV": "check_carddav",
}


def config_section(config, section="default"):
    if section in config and "inherits" in config[section]:
        ret = config_section(config, config[section]["inherits"])
    else:
        ret = {}
    if section in config:
        ret.update(config[section])
    return ret


def read_config(fn, interactive_error=False):
    if not fn:
        cfgdir = f"{os.environ.get('HOME', '/')}/.config/"
        for config_file in (
            f"{cfgdir}/davdiscovery/discovery.conf",
            f"{cfgdir}/davdiscovery/discovery.yaml",
            f"{cfgdir}/davdiscovery/discovery.json",
            "/etc/davdiscovery.conf",
        ):
            cfg = read_config(config_file)
            if cfg:
                return cfg
        return None

    try:
        try:
            with open(fn, "rb") as config_file:
                return json.load(config_file)
        except json.decoder.JSONDecodeError:
            ## Late import, wrapped in try/except.  yaml is external module,
            ## and not included in the requirements.
            try:
                import yaml

                try:
                    with open(fn, "rb") as config_file:
                        return yaml.load(config_file, yaml.SafeLoader)
                except yaml.YAMLError:
                    logging.error(
                        f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax."
                    )
            except ImportError:
                logging.error(
                    f"config file {fn} exists but is not valid json, and pyyaml is not installed."
                )

    except FileNotFoundError:
        log.info("no config file found")
    except ValueError:
        if interactive_error:
            logging.error(
                "error in config file.  Be aware that the interactive configuration will ignore and overwrite the current broken config file",
                exc_info=True,
            )
        else:
            logging.error("error in config file.  It will be ignored", exc_info=True)
    return {}


def _to_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def env_options(environ=None):
    """Discoverer options given through DAVDISCOVERY_* environment variables"""
    if environ is None:
        environ = os.environ
    options = {}
    for env_key, key in ENV_KEYS.items():
        if env_key not in environ:
            continue
        value = environ[env_key]
        if key == "timeout":
            try:
                options[key] = float(value)
            except ValueError as e:
                raise ConfigurationError(
                    reason=f"{env_key} must be a number, got '{value}'"
                ) from e
        else:
            options[key] = _to_bool(value)
    return options


def discoverer_options(config_file=None, section="default", environ=None):
    """
    Collect discoverer options from the config file section and the
    environment, the latter winning.  Unknown keys in the section are
    ignored with a warning.
    """
    config = read_config(config_file) or {}
    options = {}
    for key, value in config_section(config, section).items():
        if key == "inherits":
            continue
        if key not in CONFIG_KEYS:
            log.warning(f"Ignoring unknown config key {key} in section {section}")
            continue
        options[key] = value
    options.update(env_options(environ))
    return options


def get_discoverer(config_file=None, section="default", resolver=None, **kwargs):
    """
    Build a ServiceDiscoverer from configuration.  Explicit keyword
    arguments take precedence over the environment and the config file.
    """
    options = discoverer_options(config_file, section)
    options.update(kwargs)
    return ServiceDiscoverer(resolver=resolver, **options)
