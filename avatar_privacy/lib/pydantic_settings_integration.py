import logging
from collections.abc import Callable
from sys import modules
from typing import Any, get_type_hints

from pydantic import create_model
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_CONFIG = SettingsConfigDict(
    env_file='.env',
    env_file_encoding='utf-8',
    extra='ignore',
)


def _is_setting_name(name: str) -> bool:
    return name[:1] != '_' and name.isupper()


def pydantic_settings_integration(
    caller_name: str,
    caller_globals: dict[str, Any],
    /,
    config: SettingsConfigDict = _DEFAULT_CONFIG,
    name_filter: Callable[[str], bool] = _is_setting_name,
) -> None:
    """
    Load UPPER_CASE module globals from the environment.

    Builds a BaseSettings model out of the calling module's settings (their
    annotations or, when missing, the type of their default value), reads the
    environment and .env file, and writes the validated values back into the
    module globals. Invalid values raise pydantic.ValidationError at import time.
    """
    settings = {k: v for k, v in caller_globals.items() if name_filter(k)}
    if not settings:
        logging.warning('No settings found in %s matching the filter', caller_name)
        return

    type_hints = get_type_hints(modules[caller_name], settings)
    fields: dict[str, tuple[type, Any]] = {
        name: (
            type_hints.get(name, Any if isinstance(value, FieldInfo) else type(value)),
            value,
        )
        for name, value in settings.items()
    }

    base = type(
        f'{caller_name}_BaseSettings',
        (BaseSettings,),
        {'model_config': config},
    )
    instance = create_model(
        f'{caller_name}_Settings',
        __base__=base,
        **fields,  # type: ignore
    )()

    for name in settings:
        caller_globals[name] = getattr(instance, name)
