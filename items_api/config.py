"""Stack settings resolved from CDK context.

Values come from ``cdk.json`` or ``cdk deploy -c key=value``. Anything passed
on the command line arrives as a string, so every lookup is normalised here
before a single construct is created.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from aws_cdk import RemovalPolicy, aws_lambda as _lambda
from constructs import Node

logger = logging.getLogger(__name__)

DEFAULT_TABLE_NAME = "items"
DEFAULT_PARTITION_KEY = "itemId"

RUNTIMES = {
    "provided.al2023": _lambda.Runtime.PROVIDED_AL2023,
    "provided.al2": _lambda.Runtime.PROVIDED_AL2,
    "python3.12": _lambda.Runtime.PYTHON_3_12,
}

ARCHITECTURES = {
    "arm64": _lambda.Architecture.ARM_64,
    "x86_64": _lambda.Architecture.X86_64,
}

REMOVAL_POLICIES = {
    "destroy": RemovalPolicy.DESTROY,
    "retain": RemovalPolicy.RETAIN,
    "snapshot": RemovalPolicy.SNAPSHOT,
}

# runtime, architecture, asset path, handler
COMPUTE_PRESETS = {
    "binary": ("provided.al2023", "arm64", "lambda/target/lambda/crud-lambda", "not.required"),
    "python": ("python3.12", "arm64", "lambda", "handler.main"),
}


class ConfigurationError(ValueError):
    """A context value cannot be turned into a deployable setting."""


class ArtifactNotFoundError(ConfigurationError):
    """The compute artifact is missing from disk."""


def _lookup(table: dict, key: str, value: Any) -> Any:
    normalised = str(value).strip().lower()
    try:
        return table[normalised]
    except KeyError:
        choices = ", ".join(sorted(table))
        raise ConfigurationError(f"unsupported {key} {value!r}, expected one of: {choices}") from None


@dataclass(frozen=True)
class ComputeSettings:
    runtime: str
    architecture: str
    asset_path: str
    handler: str

    @property
    def lambda_runtime(self) -> _lambda.Runtime:
        return RUNTIMES[self.runtime]

    @property
    def lambda_architecture(self) -> _lambda.Architecture:
        return ARCHITECTURES[self.architecture]

    @property
    def is_custom_runtime(self) -> bool:
        return self.runtime.startswith("provided")

    def check_artifact(self) -> None:
        """Fail closed when the artifact directory is not deployable."""
        path = Path(self.asset_path)
        if not path.is_dir():
            raise ArtifactNotFoundError(f"artifact directory not found: {self.asset_path}")
        # custom runtimes boot from an executable named "bootstrap"
        if self.is_custom_runtime and not (path / "bootstrap").is_file():
            raise ArtifactNotFoundError(f"no bootstrap executable in {self.asset_path}")


@dataclass(frozen=True)
class StackSettings:
    table_name: Optional[str]
    partition_key: str
    removal_policy: str
    compute: ComputeSettings

    @property
    def cdk_removal_policy(self) -> RemovalPolicy:
        return REMOVAL_POLICIES[self.removal_policy]

    @classmethod
    def from_context(cls, node: Node) -> "StackSettings":
        def get(key: str, default: Any = None) -> Any:
            value = node.try_get_context(key)
            return default if value is None else value

        table_name = str(get("tableName", DEFAULT_TABLE_NAME)).strip() or None

        partition_key = str(get("partitionKey", DEFAULT_PARTITION_KEY)).strip()
        if not partition_key:
            raise ConfigurationError("partitionKey must not be empty")

        removal_policy = str(get("removalPolicy", "destroy")).strip().lower()
        _lookup(REMOVAL_POLICIES, "removalPolicy", removal_policy)

        runtime, architecture, asset_path, handler = _lookup(COMPUTE_PRESETS, "compute", get("compute", "binary"))
        runtime = str(get("runtime", runtime)).strip().lower()
        _lookup(RUNTIMES, "runtime", runtime)
        architecture = str(get("architecture", architecture)).strip().lower()
        _lookup(ARCHITECTURES, "architecture", architecture)

        compute = ComputeSettings(
            runtime=runtime,
            architecture=architecture,
            asset_path=str(get("assetPath", asset_path)),
            handler=str(get("handler", handler)),
        )
        compute.check_artifact()

        settings = cls(
            table_name=table_name,
            partition_key=partition_key,
            removal_policy=removal_policy,
            compute=compute,
        )
        logger.info(
            "table=%s pk=%s removal=%s runtime=%s/%s asset=%s",
            settings.table_name or "<generated>",
            settings.partition_key,
            settings.removal_policy,
            compute.runtime,
            compute.architecture,
            compute.asset_path,
        )
        return settings
