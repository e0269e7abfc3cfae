"""Benchmark configuration and profile loading.

Handles:
- The built-in benchmark matrix (package managers x categories).
- The per-manager command table, keyed by ``(manager, category)``.
- Loading an optional ``pmbench.yaml`` profile that overrides the defaults.
- Validating the final configuration before any command runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pmbench.bench.chart import ChartSpec
from pmbench.bench.persist import Retention

log = logging.getLogger("pmbench")

DEFAULT_PROFILE_NAME = "pmbench.yaml"


# ---------------------------------------------------------------------------
# Categories and the command table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CategoryDef:
    """A logical operation benchmarked for every package manager.

    Destructive categories (uninstall, update) run against whatever the
    preceding install-class categories left in the workspace.
    """

    name: str
    destructive: bool = False


# Destructiveness of the categories pmbench knows about.
KNOWN_CATEGORIES: dict[str, bool] = {
    "install": False,
    "install-dev": False,
    "update": True,
    "uninstall": True,
}

DEFAULT_PACKAGE_MANAGERS: tuple[str, ...] = ("npm", "pnpm", "yarn")

DEFAULT_CATEGORIES: tuple[CategoryDef, ...] = (
    CategoryDef("install"),
    CategoryDef("install-dev"),
    CategoryDef("uninstall", destructive=True),
)

DEFAULT_COMMANDS: dict[tuple[str, str], str] = {
    ("npm", "install"): "install",
    ("npm", "install-dev"): "install --save-dev",
    ("npm", "update"): "update",
    ("npm", "uninstall"): "uninstall",
    ("pnpm", "install"): "install",
    ("pnpm", "install-dev"): "install --save-dev",
    ("pnpm", "update"): "update",
    ("pnpm", "uninstall"): "uninstall",
    ("yarn", "install"): "add",
    ("yarn", "install-dev"): "add --dev",
    ("yarn", "update"): "upgrade",
    ("yarn", "uninstall"): "remove",
}


# ---------------------------------------------------------------------------
# BenchConfig
# ---------------------------------------------------------------------------


@dataclass
class BenchConfig:
    """Resolved configuration for a benchmark run."""

    # Matrix
    package_managers: list[str] = field(default_factory=lambda: list(DEFAULT_PACKAGE_MANAGERS))
    categories: list[CategoryDef] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    commands: dict[tuple[str, str], str] = field(default_factory=lambda: dict(DEFAULT_COMMANDS))

    # What gets installed
    package: str = "next"
    tag: str = "latest"

    timeout: int = 600  # Per-command timeout in seconds

    # Paths
    workspace_dir: Path = field(default_factory=lambda: Path("container"))
    results_dir: Path = field(default_factory=lambda: Path("results"))
    readme_path: Path | None = field(default_factory=lambda: Path("README.md"))

    retention: Retention = Retention.PRUNE

    # Chart
    chart: ChartSpec = field(default_factory=ChartSpec)
    background_image: Path | None = None
    strict_background: bool = False

    def command_for(self, package_manager: str, category: CategoryDef) -> str:
        """Build the full command line for one matrix cell.

        Install-class categories target ``package@tag``; destructive
        ones target the bare package name.

        Raises:
            KeyError: If the command table has no entry for the pair.
        """
        try:
            subcommand = self.commands[(package_manager, category.name)]
        except KeyError:
            raise KeyError(
                f"No '{category.name}' command configured for {package_manager}"
            ) from None
        target = self.package if category.destructive else f"{self.package}@{self.tag}"
        return f"{package_manager} {subcommand} {target}"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


@dataclass
class ValidationError:
    """A single configuration validation error."""

    field: str
    message: str
    severity: str = "error"  # "error" or "warning"


def validate_config(config: BenchConfig) -> list[ValidationError]:
    """Validate a benchmark configuration.

    Returns a list of validation errors.  Empty list means valid.
    """
    errors: list[ValidationError] = []

    if not config.package_managers:
        errors.append(
            ValidationError(
                field="package_managers",
                message="No package managers configured.",
            )
        )
    if not config.categories:
        errors.append(
            ValidationError(
                field="categories",
                message="No benchmark categories configured.",
            )
        )

    duplicates = {pm for pm in config.package_managers if config.package_managers.count(pm) > 1}
    for pm in sorted(duplicates):
        errors.append(
            ValidationError(
                field="package_managers",
                message=f"Package manager '{pm}' is listed more than once.",
            )
        )
    names = [c.name for c in config.categories]
    for name in sorted({n for n in names if names.count(n) > 1}):
        errors.append(
            ValidationError(
                field="categories",
                message=f"Category '{name}' is listed more than once.",
            )
        )

    # Every cell of the matrix needs a command.
    for pm in config.package_managers:
        for cat in config.categories:
            if (pm, cat.name) not in config.commands:
                errors.append(
                    ValidationError(
                        field=f"commands.{pm}.{cat.name}",
                        message=f"No '{cat.name}' command configured for {pm}.",
                    )
                )

    if config.timeout <= 0:
        errors.append(
            ValidationError(
                field="timeout",
                message=f"Timeout must be positive (got {config.timeout}).",
            )
        )

    if not config.package.strip():
        errors.append(
            ValidationError(
                field="package",
                message="Package to benchmark cannot be empty.",
            )
        )

    # A destructive category before any install would run against an
    # empty workspace.
    if config.categories and config.categories[0].destructive:
        errors.append(
            ValidationError(
                field="categories",
                message=(
                    f"First category '{config.categories[0].name}' is destructive; "
                    "it will run before anything is installed."
                ),
                severity="warning",
            )
        )

    if config.strict_background and config.background_image is None:
        errors.append(
            ValidationError(
                field="strict_background",
                message="strict_background is set but no background_image is configured.",
                severity="warning",
            )
        )

    return errors


# ---------------------------------------------------------------------------
# YAML profile loading
# ---------------------------------------------------------------------------


def load_profile(profile_path: Path) -> dict[str, Any]:
    """Load a benchmark profile from a YAML file.

    Profile format::

        package: next
        tag: latest
        timeout: 900
        package_managers: [npm, pnpm, yarn]
        categories:
          - install
          - install-dev
          - name: update
            destructive: true
          - uninstall
        commands:
          yarn:
            update: up
        results_dir: results
        retention: keep
        background_image: assets/board.png

    Returns:
        The parsed YAML as a dict.
    """
    try:
        import yaml
    except ImportError as exc:
        raise ImportError(
            "PyYAML is required for loading benchmark profiles. "
            "Install it with: pip install pyyaml"
        ) from exc

    if not profile_path.exists():
        raise FileNotFoundError(f"Profile not found: {profile_path}")

    text = profile_path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {profile_path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Profile must be a YAML mapping, got {type(data).__name__}")

    return data


def _parse_category(item: Any) -> CategoryDef:
    if isinstance(item, str):
        return CategoryDef(name=item, destructive=KNOWN_CATEGORIES.get(item, False))
    if isinstance(item, dict) and "name" in item:
        name = str(item["name"])
        destructive = item.get("destructive", KNOWN_CATEGORIES.get(name, False))
        if not isinstance(destructive, bool):
            raise ValueError(
                f"Category '{name}': 'destructive' must be true or false, got {destructive!r}"
            )
        return CategoryDef(name=name, destructive=destructive)
    raise ValueError(f"Category must be a name or a mapping with 'name', got {item!r}")


def config_from_profile(profile_data: dict[str, Any]) -> BenchConfig:
    """Build a BenchConfig from a parsed YAML profile.

    Keys absent from the profile keep their built-in defaults.  The
    ``commands`` table is merged over the default table, so a profile
    only needs to list managers or categories pmbench does not know.
    """
    config = BenchConfig()

    if "package_managers" in profile_data:
        managers = profile_data["package_managers"]
        if not isinstance(managers, list):
            raise ValueError("Profile 'package_managers' must be a list")
        config.package_managers = [str(pm) for pm in managers]

    if "categories" in profile_data:
        categories = profile_data["categories"]
        if not isinstance(categories, list):
            raise ValueError("Profile 'categories' must be a list")
        config.categories = [_parse_category(item) for item in categories]

    commands_data = profile_data.get("commands", {}) or {}
    if not isinstance(commands_data, dict):
        raise ValueError("Profile 'commands' must be a mapping of manager -> category -> command")
    for pm, table in commands_data.items():
        if not isinstance(table, dict):
            raise ValueError(f"Commands for '{pm}' must be a mapping, got {type(table).__name__}")
        for cat_name, subcommand in table.items():
            config.commands[(str(pm), str(cat_name))] = str(subcommand)

    config.package = str(profile_data.get("package", config.package))
    config.tag = str(profile_data.get("tag", config.tag))
    if "timeout" in profile_data:
        timeout = profile_data["timeout"]
        if isinstance(timeout, bool) or not isinstance(timeout, int):
            raise ValueError(
                f"Profile 'timeout' must be a whole number of seconds, got {timeout!r}"
            )
        config.timeout = timeout

    if profile_data.get("workspace_dir"):
        config.workspace_dir = Path(profile_data["workspace_dir"])
    if profile_data.get("results_dir"):
        config.results_dir = Path(profile_data["results_dir"])
    if "readme_path" in profile_data:
        readme = profile_data["readme_path"]
        config.readme_path = Path(readme) if readme else None

    if "retention" in profile_data:
        try:
            config.retention = Retention(str(profile_data["retention"]))
        except ValueError:
            choices = ", ".join(r.value for r in Retention)
            raise ValueError(
                f"Unknown retention policy '{profile_data['retention']}' (choose from {choices})"
            ) from None

    if profile_data.get("background_image"):
        config.background_image = Path(profile_data["background_image"])
    strict = profile_data.get("strict_background", False)
    if not isinstance(strict, bool):
        raise ValueError(f"Profile 'strict_background' must be true or false, got {strict!r}")
    config.strict_background = strict

    return config


def load_config(directory: Path) -> BenchConfig:
    """Return the configuration for a run started in *directory*.

    Uses ``pmbench.yaml`` from *directory* when it exists, otherwise the
    built-in defaults.  Relative paths stay relative to the process
    working directory.
    """
    profile_path = directory / DEFAULT_PROFILE_NAME
    if not profile_path.exists():
        log.debug("No %s found, using built-in defaults", DEFAULT_PROFILE_NAME)
        return BenchConfig()
    log.info("Loading profile %s", profile_path)
    return config_from_profile(load_profile(profile_path))
