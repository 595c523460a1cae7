"""Settings schema and validation tests."""

import pytest
from pydantic import ValidationError

from calycompta.modules.builtin import BUILTIN_MODULES
from calycompta.modules.schemas import SettingDefinition, SettingDependency
from calycompta.modules.settings import applicable_settings, validate_settings
from calycompta.utils.exceptions import SettingValidationError

MODULES = {m.id: m for m in BUILTIN_MODULES}


class TestBounds:
    @pytest.mark.parametrize("value", [-1, 10001, -0.5, 10000.01])
    def test_out_of_range_rejected(self, value):
        with pytest.raises(SettingValidationError) as exc:
            validate_settings(
                MODULES["transactions"], {"validation.signatureThreshold": value}
            )
        assert exc.value.key == "validation.signatureThreshold"
        assert exc.value.status_code == 422

    @pytest.mark.parametrize("value", [0, 1, 100, 9999.5, 10000])
    def test_in_range_accepted(self, value):
        validate_settings(MODULES["transactions"], {"validation.signatureThreshold": value})


class TestTypes:
    def test_boolean_setting_rejects_string(self):
        with pytest.raises(SettingValidationError) as exc:
            validate_settings(MODULES["transactions"], {"download.autoRenameFiles": "yes"})
        assert exc.value.key == "download.autoRenameFiles"

    def test_number_setting_rejects_bool(self):
        with pytest.raises(SettingValidationError):
            validate_settings(MODULES["expenses"], {"notifications.reminderDays": True})

    def test_select_requires_declared_option(self):
        with pytest.raises(SettingValidationError) as exc:
            validate_settings(MODULES["expenses"], {"payment.defaultPaymentMethod": "bitcoin"})
        assert exc.value.key == "payment.defaultPaymentMethod"

    def test_select_accepts_declared_option(self):
        validate_settings(MODULES["expenses"], {"payment.defaultPaymentMethod": "cash"})

    def test_undeclared_key_rejected(self):
        with pytest.raises(SettingValidationError) as exc:
            validate_settings(MODULES["expenses"], {"payment.currency": "EUR"})
        assert exc.value.key == "payment.currency"

    def test_default_values_are_valid(self):
        for module in BUILTIN_MODULES:
            validate_settings(module, module.default_settings())


class TestRules:
    def test_custom_predicate_message(self):
        with pytest.raises(SettingValidationError) as exc:
            validate_settings(
                MODULES["transactions"], {"download.filenamePattern": "{ANNÉE}<{MOIS}"}
            )
        assert "caractères interdits" in exc.value.message

    def test_pattern(self):
        module = MODULES["inventory"]
        validate_settings(module, {"general.referencePrefix": "MAT01"})
        with pytest.raises(SettingValidationError):
            validate_settings(module, {"general.referencePrefix": "mat"})

    def test_first_violation_in_declaration_order(self):
        values = {
            "validation.signatureThreshold": -1,
            "download.autoRenameFiles": "nope",
        }
        with pytest.raises(SettingValidationError) as exc:
            validate_settings(MODULES["transactions"], values)
        assert exc.value.key == "download.autoRenameFiles"

    def test_required_setting_missing(self):
        module = MODULES["expenses"].model_copy(deep=True)
        module.settings["payment"]["defaultPaymentMethod"].required = True
        with pytest.raises(SettingValidationError) as exc:
            validate_settings(module, {})
        assert exc.value.key == "payment.defaultPaymentMethod"


class TestDependencies:
    def test_parses_string_forms(self):
        truthy = SettingDependency.model_validate("workflow.autoApprove")
        assert truthy.key == "workflow.autoApprove"
        assert truthy.equals is None

        equality = SettingDependency.model_validate("payment.defaultPaymentMethod=transfer")
        assert equality.key == "payment.defaultPaymentMethod"
        assert equality.equals == "transfer"
        assert str(equality) == "payment.defaultPaymentMethod=transfer"

    def test_holds_against_same_map(self):
        dep = SettingDependency(key="payment.defaultPaymentMethod", equals="transfer")
        assert dep.holds({"payment.defaultPaymentMethod": "transfer"})
        assert not dep.holds({"payment.defaultPaymentMethod": "cash"})
        assert not dep.holds({})

    def test_boolean_equality_is_textual(self):
        dep = SettingDependency.model_validate("flag=true")
        assert dep.holds({"flag": True})
        assert not dep.holds({"flag": False})

    def test_applicable_settings_follow_values(self):
        module = MODULES["expenses"]
        defaults = module.default_settings()
        keys = {s.key for s in applicable_settings(module, defaults)}
        assert "payment.requireIBAN" in keys
        assert "workflow.autoApproveThreshold" not in keys

        cash = {**defaults, "payment.defaultPaymentMethod": "cash", "workflow.autoApprove": True}
        keys = {s.key for s in applicable_settings(module, cash)}
        assert "payment.requireIBAN" not in keys
        assert "workflow.autoApproveThreshold" in keys


class TestSettingDefinition:
    def test_default_must_match_type(self):
        with pytest.raises(ValidationError):
            SettingDefinition(key="x.limit", type="number", default_value="ten")

    def test_select_default_must_be_an_option(self):
        with pytest.raises(ValidationError):
            SettingDefinition(
                key="x.mode",
                type="select",
                default_value="c",
                options=[{"value": "a"}, {"value": "b"}],
            )
