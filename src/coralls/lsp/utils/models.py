"""
Data models for the Coral language server.

This module defines the settings the host can supply for each document and
the cache entry states used while those settings are being fetched.
"""

import asyncio
from dataclasses import dataclass
from typing import Union

from pydantic import BaseModel, ConfigDict, Field


SETTINGS_SECTION = "languageServerExample"


class ExampleSettings(BaseModel):
    """
    Settings read from the ``languageServerExample`` configuration section.

    The host sends camelCase keys; the model accepts either the alias or the
    Python field name.

    Attributes:
        max_number_of_problems: Upper bound on diagnostics published per document
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    max_number_of_problems: int = Field(default=1000, alias="maxNumberOfProblems")


DEFAULT_SETTINGS = ExampleSettings()


@dataclass(frozen=True)
class Pending:
    """A settings fetch that is still outstanding; concurrent callers share the task."""
    task: "asyncio.Task[ExampleSettings]"


@dataclass(frozen=True)
class Resolved:
    """Settings that have been fetched for a resource."""
    value: ExampleSettings


SettingsEntry = Union[Pending, Resolved]
