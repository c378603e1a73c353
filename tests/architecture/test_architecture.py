"""Architecture import rule tests for the task tracker service.

These tests enforce the project's architectural boundaries:
- Business logic (services/) is independent of the HTTP framework
- The service layer does not depend on routers or the app module
- Config and schemas remain leaf-like modules
- Routers receive configuration through AppState only
"""

from __future__ import annotations

import pytest
from pytestarch import EvaluableArchitecture, LayeredArchitecture, LayerRule, Rule

_PKG = "task_tracker_service"


def _assert_submodules_do_not_import_named(
    evaluable: EvaluableArchitecture, importer: str, imported: str
) -> None:
    (
        Rule()
        .modules_that()
        .are_sub_modules_of(importer)
        .should_not()
        .import_modules_that()
        .are_named(imported)
        .assert_applies(evaluable)
    )


def _assert_named_does_not_import_submodules(
    evaluable: EvaluableArchitecture, importer: str, imported: str
) -> None:
    (
        Rule()
        .modules_that()
        .are_named(importer)
        .should_not()
        .import_modules_that()
        .are_sub_modules_of(imported)
        .assert_applies(evaluable)
    )


# ---------------------------------------------------------------------------
# Module-level rules: services layer independence
# ---------------------------------------------------------------------------


@pytest.mark.architecture
class TestServicesLayerIndependence:
    """The services/ layer contains business logic with no framework imports."""

    def test_services_must_not_import_routers(self, evaluable: EvaluableArchitecture) -> None:
        """Business logic must not depend on HTTP routing."""
        (
            Rule()
            .modules_that()
            .are_sub_modules_of(f"{_PKG}.services")
            .should_not()
            .import_modules_that()
            .are_sub_modules_of(f"{_PKG}.routers")
            .assert_applies(evaluable)
        )

    @pytest.mark.parametrize(
        "module",
        [f"{_PKG}.app", f"{_PKG}.core.middleware", f"{_PKG}.schemas", f"{_PKG}.config"],
    )
    def test_services_must_not_import_outer_modules(
        self, evaluable: EvaluableArchitecture, module: str
    ) -> None:
        """Business logic must not depend on the app factory, middleware, schemas or config."""
        _assert_submodules_do_not_import_named(evaluable, f"{_PKG}.services", module)


# ---------------------------------------------------------------------------
# Module-level rules: config and schemas are leaf modules
# ---------------------------------------------------------------------------


@pytest.mark.architecture
class TestLeafModules:
    """Config and schemas should not depend on service internals."""

    @pytest.mark.parametrize("package", ["routers", "services", "core"])
    def test_config_is_a_leaf(self, evaluable: EvaluableArchitecture, package: str) -> None:
        _assert_named_does_not_import_submodules(
            evaluable, f"{_PKG}.config", f"{_PKG}.{package}"
        )

    @pytest.mark.parametrize("package", ["routers", "services", "core"])
    def test_schemas_is_a_leaf(self, evaluable: EvaluableArchitecture, package: str) -> None:
        _assert_named_does_not_import_submodules(
            evaluable, f"{_PKG}.schemas", f"{_PKG}.{package}"
        )


# ---------------------------------------------------------------------------
# Module-level rules: routers
# ---------------------------------------------------------------------------


@pytest.mark.architecture
class TestRouterConstraints:
    """Routers read their collaborators from AppState."""

    def test_routers_must_not_import_config_directly(
        self, evaluable: EvaluableArchitecture
    ) -> None:
        """Configuration flows to routers via AppState."""
        _assert_submodules_do_not_import_named(evaluable, f"{_PKG}.routers", f"{_PKG}.config")

    def test_routers_must_not_import_app(self, evaluable: EvaluableArchitecture) -> None:
        _assert_submodules_do_not_import_named(evaluable, f"{_PKG}.routers", f"{_PKG}.app")

    def test_routers_must_not_import_lifespan(self, evaluable: EvaluableArchitecture) -> None:
        _assert_submodules_do_not_import_named(
            evaluable, f"{_PKG}.routers", f"{_PKG}.core.lifespan"
        )


# ---------------------------------------------------------------------------
# Layer-level rules
# ---------------------------------------------------------------------------


@pytest.mark.architecture
class TestLayeredArchitecture:
    """Layer-level dependency rules."""

    @pytest.mark.parametrize("layer", ["routers", "core"])
    def test_services_layer_must_not_access_outer_layers(
        self,
        evaluable: EvaluableArchitecture,
        layered_arch: LayeredArchitecture,
        layer: str,
    ) -> None:
        (
            LayerRule()
            .based_on(layered_arch)
            .layers_that()
            .are_named("services")
            .should_not()
            .access_layers_that()
            .are_named(layer)
            .assert_applies(evaluable)
        )
