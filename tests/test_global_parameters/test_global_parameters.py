"""Tests for the global parameter registry and argument resolution."""

from __future__ import annotations

import pytest

from hardhat_core.exceptions import (
    GlobalParameterAlreadyDefinedError,
    InvalidGlobalParameterDefinitionError,
    InvalidNameError,
    InvalidValueForTypeError,
    ReservedNameError,
)
from hardhat_core.global_parameters import (
    build_global_parameter_definition,
    build_global_parameters_map,
    resolve_global_arguments,
)
from hardhat_core.models import GlobalParameter, ParameterType, Plugin


def _plugin(plugin_id: str, *params: dict) -> Plugin:
    return Plugin(id=plugin_id, global_parameters=list(params))


# ---------------------------------------------------------------------------
# build_global_parameter_definition
# ---------------------------------------------------------------------------


class TestBuildGlobalParameterDefinition:
    def test_type_defaults_to_string(self) -> None:
        param = build_global_parameter_definition(name="network", default_value="localhost")
        assert param.parameter_type == ParameterType.STRING
        assert param.default_value == "localhost"
        assert param.description == ""

    def test_definition_is_immutable(self) -> None:
        param = build_global_parameter_definition(name="network", default_value="localhost")
        with pytest.raises(Exception):
            param.name = "other"  # type: ignore[misc]

    def test_type_given_as_string(self) -> None:
        param = build_global_parameter_definition(
            name="gasLimit", parameter_type="BIGINT", default_value=10
        )
        assert param.parameter_type == ParameterType.BIGINT

    def test_invalid_name(self) -> None:
        with pytest.raises(InvalidNameError) as exc_info:
            build_global_parameter_definition(name="Invalid_Name", default_value="x")
        assert exc_info.value.name == "Invalid_Name"

    def test_reserved_name(self) -> None:
        with pytest.raises(ReservedNameError) as exc_info:
            build_global_parameter_definition(name="help", default_value="x")
        assert exc_info.value.name == "help"

    def test_name_is_checked_before_default(self) -> None:
        with pytest.raises(ReservedNameError):
            build_global_parameter_definition(
                name="config", parameter_type=ParameterType.INT, default_value="nope"
            )
        with pytest.raises(InvalidNameError):
            build_global_parameter_definition(
                name="Bad", parameter_type=ParameterType.INT, default_value="nope"
            )

    def test_invalid_default(self) -> None:
        with pytest.raises(InvalidValueForTypeError) as exc_info:
            build_global_parameter_definition(
                name="retries", parameter_type=ParameterType.INT, default_value="3"
            )
        assert exc_info.value.name == "defaultValue"
        assert exc_info.value.value == "3"
        assert exc_info.value.parameter_type == ParameterType.INT

    def test_float_default_too_large_for_a_float(self) -> None:
        with pytest.raises(InvalidValueForTypeError) as exc_info:
            build_global_parameter_definition(
                name="ratio", parameter_type=ParameterType.FLOAT, default_value=10**400
            )
        assert exc_info.value.name == "defaultValue"


# ---------------------------------------------------------------------------
# build_global_parameters_map
# ---------------------------------------------------------------------------


class TestBuildGlobalParametersMap:
    def test_empty(self) -> None:
        assert build_global_parameters_map([]) == {}

    def test_plugins_without_parameters_are_skipped(self) -> None:
        assert build_global_parameters_map([Plugin(id="a")]) == {}

    def test_collects_every_plugin(self) -> None:
        plugins = [
            _plugin("a", {"name": "param1", "parameter_type": "BOOLEAN", "default_value": True}),
            _plugin(
                "b",
                {"name": "param2", "default_value": "x", "description": "second"},
                {"name": "param3", "parameter_type": "BIGINT", "default_value": 0},
            ),
        ]

        result = build_global_parameters_map(plugins)

        assert list(result) == ["param1", "param2", "param3"]
        assert result["param1"].plugin_id == "a"
        assert result["param1"].param.parameter_type == ParameterType.BOOLEAN
        assert result["param2"].plugin_id == "b"
        assert result["param2"].param.description == "second"
        assert result["param3"].param.default_value == 0

    def test_accepts_model_instances(self) -> None:
        param = GlobalParameter(name="network", default_value="localhost")
        result = build_global_parameters_map([Plugin(id="a", global_parameters=[param])])
        assert result["network"].param == param

    def test_duplicate_across_plugins(self) -> None:
        plugins = [
            _plugin("first", {"name": "network", "default_value": "a"}),
            _plugin("second", {"name": "network", "default_value": "b"}),
        ]

        with pytest.raises(GlobalParameterAlreadyDefinedError) as exc_info:
            build_global_parameters_map(plugins)

        exc = exc_info.value
        assert exc.plugin == "second"
        assert exc.global_parameter == "network"
        assert exc.defined_by_plugin == "first"

    def test_duplicate_within_one_plugin(self) -> None:
        plugin = _plugin(
            "a",
            {"name": "network", "default_value": "a"},
            {"name": "network", "default_value": "b"},
        )
        with pytest.raises(GlobalParameterAlreadyDefinedError) as exc_info:
            build_global_parameters_map([plugin])
        assert exc_info.value.defined_by_plugin == "a"

    def test_duplicate_is_reported_before_an_invalid_default(self) -> None:
        plugins = [
            _plugin("first", {"name": "network", "default_value": "a"}),
            _plugin("second", {"name": "network", "parameter_type": "INT", "default_value": "b"}),
        ]
        with pytest.raises(GlobalParameterAlreadyDefinedError):
            build_global_parameters_map(plugins)

    def test_invalid_definitions_are_rejected(self) -> None:
        with pytest.raises(InvalidNameError):
            build_global_parameters_map([_plugin("a", {"name": "Bad", "default_value": "x"})])
        with pytest.raises(ReservedNameError):
            build_global_parameters_map([_plugin("a", {"name": "version", "default_value": "x"})])
        with pytest.raises(InvalidValueForTypeError):
            build_global_parameters_map(
                [_plugin("a", {"name": "n", "parameter_type": "INT", "default_value": 1.5})]
            )

    def test_camel_case_keys_are_reported(self) -> None:
        plugin = _plugin("gas-reporter", {"name": "gasReport", "defaultValue": False})
        with pytest.raises(InvalidGlobalParameterDefinitionError) as exc_info:
            build_global_parameters_map([plugin])
        assert exc_info.value.plugin == "gas-reporter"
        assert "defaultValue" in exc_info.value.reason

    def test_missing_name(self) -> None:
        with pytest.raises(InvalidGlobalParameterDefinitionError, match="name"):
            build_global_parameters_map([_plugin("a", {"default_value": "x"})])

    def test_entry_that_is_not_a_mapping(self) -> None:
        with pytest.raises(InvalidGlobalParameterDefinitionError, match="str"):
            build_global_parameters_map([_plugin("a", "network")])

    def test_unknown_parameter_type(self) -> None:
        plugin = _plugin("a", {"name": "n", "parameter_type": "DECIMAL", "default_value": 1})
        with pytest.raises(InvalidGlobalParameterDefinitionError) as exc_info:
            build_global_parameters_map([plugin])
        assert exc_info.value.plugin == "a"
        assert "DECIMAL" in str(exc_info.value)


# ---------------------------------------------------------------------------
# resolve_global_arguments
# ---------------------------------------------------------------------------


@pytest.fixture
def parameters_map():
    return build_global_parameters_map(
        [
            _plugin(
                "a",
                {"name": "param1", "parameter_type": "BOOLEAN", "default_value": True},
                {"name": "param2", "default_value": "default"},
            ),
            _plugin("b", {"name": "param3", "parameter_type": "BIGINT", "default_value": 0}),
        ]
    )


class TestResolveGlobalArguments:
    def test_defaults_only(self, parameters_map) -> None:
        assert resolve_global_arguments({}, parameters_map, environ={}) == {
            "param1": True,
            "param2": "default",
            "param3": 0,
        }

    def test_empty_map(self) -> None:
        assert resolve_global_arguments({"param1": "x"}, {}, environ={"HARDHAT_PARAM1": "y"}) == {}

    def test_environment_overrides_default(self, parameters_map) -> None:
        result = resolve_global_arguments({}, parameters_map, environ={"HARDHAT_PARAM3": "5n"})
        assert result["param3"] == 5
        assert result["param1"] is True

    def test_user_value_overrides_environment(self, parameters_map) -> None:
        result = resolve_global_arguments(
            {"param2": "from-user"},
            parameters_map,
            environ={"HARDHAT_PARAM2": "from-env"},
        )
        assert result["param2"] == "from-user"

    def test_user_values_are_parsed(self, parameters_map) -> None:
        result = resolve_global_arguments(
            {"param1": "false", "param3": "123456789012345678901234567890"},
            parameters_map,
            environ={},
        )
        assert result["param1"] is False
        assert result["param3"] == 123456789012345678901234567890

    def test_unknown_names_are_ignored(self, parameters_map) -> None:
        result = resolve_global_arguments(
            {"unknown": "x"}, parameters_map, environ={"HARDHAT_OTHER": "y"}
        )
        assert set(result) == {"param1", "param2", "param3"}

    def test_reads_os_environ_by_default(self, parameters_map, monkeypatch) -> None:
        monkeypatch.setenv("HARDHAT_PARAM2", "from-os")
        result = resolve_global_arguments({}, parameters_map)
        assert result["param2"] == "from-os"

    def test_invalid_user_value(self, parameters_map) -> None:
        with pytest.raises(InvalidValueForTypeError) as exc_info:
            resolve_global_arguments({"param1": "not a boolean"}, parameters_map, environ={})
        exc = exc_info.value
        assert exc.value == "not a boolean"
        assert exc.name == "param1"
        assert exc.parameter_type == ParameterType.BOOLEAN

    def test_invalid_environment_value(self, parameters_map) -> None:
        with pytest.raises(InvalidValueForTypeError) as exc_info:
            resolve_global_arguments({}, parameters_map, environ={"HARDHAT_PARAM3": "1.5"})
        assert exc_info.value.name == "param3"
        assert exc_info.value.value == "1.5"

    def test_invalid_environment_value_is_ignored_when_user_supplies_one(
        self, parameters_map
    ) -> None:
        result = resolve_global_arguments(
            {"param1": "false"}, parameters_map, environ={"HARDHAT_PARAM1": "garbage"}
        )
        assert result["param1"] is False

    def test_environment_value_out_of_float_range(self) -> None:
        parameters_map = build_global_parameters_map(
            [_plugin("a", {"name": "ratio", "parameter_type": "FLOAT", "default_value": 1.0})]
        )
        raw = "0x" + "f" * 400
        with pytest.raises(InvalidValueForTypeError) as exc_info:
            resolve_global_arguments({}, parameters_map, environ={"HARDHAT_RATIO": raw})
        assert exc_info.value.name == "ratio"
        assert exc_info.value.value == raw

    def test_user_value_with_too_many_digits(self, parameters_map) -> None:
        with pytest.raises(InvalidValueForTypeError) as exc_info:
            resolve_global_arguments({"param3": "9" * 5000}, parameters_map, environ={})
        assert exc_info.value.name == "param3"
