"""Action inputs read from GitHub Actions style environment variables."""

import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

from buildstash_upload.constants import (
    STRUCTURE_FILE,
    STRUCTURE_FILE_EXPANSION,
    SUPPORTED_STRUCTURES,
)
from buildstash_upload.exceptions import ConfigurationError


@dataclass(frozen=True)
class UploadInputs:
    """Everything the caller supplies for one upload run."""

    primary_file_path: str
    api_key: str
    expansion_file_path: str = ""
    structure: str = STRUCTURE_FILE
    version_component_1_major: str = ""
    version_component_2_minor: str = ""
    version_component_3_patch: str = ""
    version_component_extra: str = ""
    version_component_meta: str = ""
    custom_build_number: str = ""
    ci_pipeline: str = ""
    ci_run_id: str = ""
    ci_run_url: str = ""
    ci_build_duration: str = ""
    vc_host_type: str = ""
    vc_host: str = ""
    vc_repo_name: str = ""
    vc_repo_url: str = ""
    vc_branch: str = ""
    vc_commit_sha: str = ""
    vc_commit_url: str = ""
    platform: str = ""
    stream: str = ""
    notes: str = ""

    @property
    def has_expansion(self) -> bool:
        """Expansion is only sent for file+expansion with a path supplied."""
        return self.structure == STRUCTURE_FILE_EXPANSION and bool(self.expansion_file_path)

    def descriptive_fields(self) -> dict:
        """Version, CI and VCS metadata forwarded verbatim to the registry."""
        skip = {'primary_file_path', 'api_key', 'expansion_file_path', 'structure'}
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name not in skip}


REQUIRED_INPUTS = ('primary_file_path', 'api_key')


def _input_env_name(name: str) -> str:
    return f"INPUT_{name.replace(' ', '_').upper()}"


def get_input(name: str, environ: Mapping[str, str], required: bool = False) -> str:
    """
    Read one action input.

    Args:
        name: Input name as declared by the action (e.g. "primary_file_path")
        environ: Environment mapping to read from
        required: Raise when the input is missing or blank

    Returns:
        Stripped input value, "" when absent

    Raises:
        ConfigurationError: If a required input is missing
    """
    value = environ.get(_input_env_name(name), '').strip()
    if required and not value:
        raise ConfigurationError(f"Input required and not supplied: {name}")
    return value


def load_inputs(environ: Optional[Mapping[str, str]] = None) -> UploadInputs:
    """
    Build UploadInputs from the environment.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Populated UploadInputs

    Raises:
        ConfigurationError: If required inputs are missing or structure is unknown
    """
    if environ is None:
        environ = os.environ

    values = {}
    for f in fields(UploadInputs):
        value = get_input(f.name, environ, required=f.name in REQUIRED_INPUTS)
        if value or f.name in REQUIRED_INPUTS:
            values[f.name] = value

    structure = values.get('structure', STRUCTURE_FILE)
    if structure not in SUPPORTED_STRUCTURES:
        raise ConfigurationError(
            f"Unsupported structure '{structure}', expected one of: {', '.join(SUPPORTED_STRUCTURES)}"
        )

    return UploadInputs(**values)
