import aws_cdk as cdk
import pytest

from items_api.config import (
    ArtifactNotFoundError,
    ConfigurationError,
    StackSettings,
)


def settings_for(**context):
    return StackSettings.from_context(cdk.App(context=context).node)


def test_defaults_match_the_binary_deployment(binary_artifact):
    settings = settings_for(assetPath=str(binary_artifact))

    assert settings.table_name == "items"
    assert settings.partition_key == "itemId"
    assert settings.removal_policy == "destroy"
    assert settings.cdk_removal_policy == cdk.RemovalPolicy.DESTROY
    assert settings.compute.runtime == "provided.al2023"
    assert settings.compute.architecture == "arm64"
    assert settings.compute.handler == "not.required"


def test_python_preset(python_artifact):
    settings = settings_for(compute="python", assetPath=str(python_artifact))

    assert settings.compute.runtime == "python3.12"
    assert settings.compute.handler == "handler.main"
    assert not settings.compute.is_custom_runtime


def test_cli_strings_are_normalised(binary_artifact):
    settings = settings_for(
        assetPath=str(binary_artifact),
        removalPolicy=" RETAIN ",
        architecture="X86_64",
    )

    assert settings.cdk_removal_policy == cdk.RemovalPolicy.RETAIN
    assert settings.compute.architecture == "x86_64"


def test_empty_table_name_means_generated(binary_artifact):
    assert settings_for(assetPath=str(binary_artifact), tableName="").table_name is None


@pytest.mark.parametrize(
    "context, message",
    [
        ({"removalPolicy": "keep"}, "removalPolicy"),
        ({"runtime": "nodejs20.x"}, "runtime"),
        ({"architecture": "mips"}, "architecture"),
        ({"compute": "docker"}, "compute"),
        ({"partitionKey": " "}, "partitionKey"),
    ],
)
def test_rejects_bad_context(binary_artifact, context, message):
    with pytest.raises(ConfigurationError, match=message):
        settings_for(assetPath=str(binary_artifact), **context)


def test_missing_artifact_fails_closed(tmp_path):
    with pytest.raises(ArtifactNotFoundError, match="not found"):
        settings_for(assetPath=str(tmp_path / "missing"))


def test_custom_runtime_needs_bootstrap(tmp_path):
    with pytest.raises(ArtifactNotFoundError, match="bootstrap"):
        settings_for(assetPath=str(tmp_path))


def test_python_runtime_does_not_need_bootstrap(tmp_path):
    settings = settings_for(runtime="python3.12", assetPath=str(tmp_path))

    assert settings.compute.asset_path == str(tmp_path)
