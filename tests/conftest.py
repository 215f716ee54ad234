"""Pytest configuration and shared fixtures for coil nesting tests."""

from __future__ import annotations

import pytest

from coilnest.domain import Part, WeightRange
from coilnest.infrastructure import NestingParameters


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: end-to-end tests across the whole engine"
    )
    config.addinivalue_line("markers", "slow: tests that take a long time to run")


# =============================================================================
# Shared fixtures
# =============================================================================


@pytest.fixture
def make_part():
    """Factory for parts with SS400 2 mm defaults."""

    def _make(
        id: str = "P1",
        width: float = 1000.0,
        length: float = 2500.0,
        quantity: int = 1,
        thickness: float = 2.0,
        grade: str = "SS400",
        project_name: str = "",
    ) -> Part:
        return Part(
            id=id,
            width=width,
            length=length,
            quantity=quantity,
            thickness=thickness,
            grade=grade,
            project_name=project_name,
        )

    return _make


@pytest.fixture
def single_width_parameters() -> NestingParameters:
    """Default constraints with a single 1500 mm candidate width."""
    return NestingParameters(
        max_sheet_length=18000.0,
        kerf=5.0,
        candidate_coil_widths=(1500.0,),
        roll_weight_range=WeightRange(min=4000.0, max=5500.0),
    )


@pytest.fixture
def light_window_parameters() -> NestingParameters:
    """Constraints with a weight window reachable by 2 mm plate.

    At 1500 mm wide and 2 mm thick a sheet weighs 23.55 kg per metre, so
    the 100-200 kg window spans roughly 4247-8492 mm.
    """
    return NestingParameters(
        max_sheet_length=18000.0,
        kerf=5.0,
        candidate_coil_widths=(1500.0,),
        roll_weight_range=WeightRange(min=100.0, max=200.0),
    )
