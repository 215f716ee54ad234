"""End-to-end tests of the optimization command.

These tests check the properties every cutting plan must have:
- every piece is either nested or reported unplaceable
- sheets stay within the coil width and the maximum length
- nested parts keep the kerf gap and never overlap
- non-last sheets meet the minimum roll weight or are flagged
- identical inputs give identical plans
"""

from __future__ import annotations

import random
import time
from dataclasses import replace

import pytest

from coilnest.application import OptimizeCuttingPlanCommand
from coilnest.domain import (
    InputInvalidError,
    NestingAlgorithm,
    Part,
    WarningCode,
    WeightRange,
    steel_weight,
)
from coilnest.infrastructure import NestingParameters, OptimizationResult

pytestmark = pytest.mark.integration

ALL_ALGORITHMS = list(NestingAlgorithm)


@pytest.fixture
def command() -> OptimizeCuttingPlanCommand:
    return OptimizeCuttingPlanCommand()


@pytest.fixture
def mixed_parts() -> list[Part]:
    return [
        Part("web-plate", 1180, 6200, 4, 8, "S355", "Bridge"),
        Part("flange", 400, 9000, 6, 8, "S355", "Bridge"),
        Part("stiffener", 250, 600, 30, 8, "S355", "Bridge"),
        Part("cover", 900, 1400, 12, 6, "SS400", "Hall"),
        Part("gusset", 350, 350, 40, 6, "SS400", "Hall"),
        Part("strap", 150, 3200, 10, 6, "SS400", "Hall"),
    ]


@pytest.fixture
def mixed_parameters() -> NestingParameters:
    return NestingParameters(candidate_coil_widths=(1200, 1250, 1500, 1800))


def _check_plan(result: OptimizationResult, parameters: NestingParameters) -> None:
    kerf = parameters.kerf
    window = parameters.roll_weight_range
    for group in result.groups:
        for layout in group.layouts:
            assert layout.width == group.coil_width
            assert layout.length <= parameters.max_sheet_length + 1e-6
            assert layout.weight_kg <= window.max + 1e-6
            if not layout.is_last:
                assert layout.weight_kg >= window.min - 1e-6 or layout.underweight
            placements = layout.placements
            for p in placements:
                assert p.x >= 0 and p.y >= 0
                assert p.right_edge <= layout.width + 1e-6
                assert p.top_edge <= layout.length + 1e-6
            for i, a in enumerate(placements):
                for b in placements[i + 1 :]:
                    assert (
                        a.right_edge + kerf <= b.x + 1e-6
                        or b.right_edge + kerf <= a.x + 1e-6
                        or a.top_edge + kerf <= b.y + 1e-6
                        or b.top_edge + kerf <= a.y + 1e-6
                    )
        assert group.layouts == () or group.layouts[-1].is_last


def _nested_ids(result: OptimizationResult) -> list[str]:
    return [
        p.instance_id
        for group in result.groups
        for layout in group.layouts
        for p in layout.placements
    ]


class TestWorkedScenario:
    """Ten 1000 x 2500 mm pieces of 2 mm SS400 on a 1500 mm coil."""

    @pytest.fixture
    def parts(self) -> list[Part]:
        return [Part("P1", 1000, 2500, 10, 2, "SS400", "Demo")]

    def test_layout(self, command, parts, single_width_parameters) -> None:
        result = command.execute(parts, single_width_parameters)

        assert result.summary.total_parts == 10
        assert result.summary.total_parts_nested == 10
        group = result.groups[0]
        assert group.material_key.label == "SS400_2mm"
        assert group.coil_width == 1500
        assert [layout.piece_count for layout in group.layouts] == [7, 3]
        assert group.layouts[0].length == pytest.approx(17530)
        assert group.layouts[1].length == pytest.approx(7510)
        assert [p.y for p in group.layouts[0].placements] == pytest.approx(
            [0, 2505, 5010, 7515, 10020, 12525, 15030]
        )

    def test_unreachable_weight_is_flagged(self, command, parts, single_width_parameters) -> None:
        result = command.execute(parts, single_width_parameters)

        first, last = result.groups[0].layouts
        assert first.underweight
        assert first.weight_kg == pytest.approx(steel_weight(1500, 17530, 2))
        assert not last.underweight
        codes = [w.code for w in result.warnings]
        assert codes == [WarningCode.SUB_MINIMUM_WEIGHT]
        assert result.warnings[0].sheet_number == 1

    def test_reachable_weight_window(self, command, parts, light_window_parameters) -> None:
        result = command.execute(parts, light_window_parameters)

        _check_plan(result, light_window_parameters)
        assert result.summary.total_parts_nested == 10
        assert not result.has_warnings
        for layout in result.groups[0].layouts[:-1]:
            assert light_window_parameters.roll_weight_range.contains(layout.weight_kg)


class TestPlanProperties:
    """Properties that hold for every algorithm."""

    @pytest.mark.parametrize("algorithm", ALL_ALGORITHMS)
    def test_count_conservation(self, command, mixed_parts, mixed_parameters, algorithm) -> None:
        parameters = replace(mixed_parameters, algorithm=algorithm, ordering_iterations=3)
        result = command.execute(mixed_parts, parameters)

        unplaced = sum(u.instances for u in result.unplaceable_parts)
        total = sum(p.quantity for p in mixed_parts)
        assert result.summary.total_parts == total
        assert result.summary.total_parts_nested + unplaced == total
        nested = _nested_ids(result)
        assert len(nested) == len(set(nested))

    @pytest.mark.parametrize("algorithm", ALL_ALGORITHMS)
    def test_geometry_and_weight(self, command, mixed_parts, mixed_parameters, algorithm) -> None:
        parameters = replace(mixed_parameters, algorithm=algorithm, ordering_iterations=3)
        _check_plan(command.execute(mixed_parts, parameters), parameters)

    @pytest.mark.parametrize("algorithm", ALL_ALGORITHMS)
    def test_idempotent(self, command, mixed_parts, mixed_parameters, algorithm) -> None:
        parameters = replace(mixed_parameters, algorithm=algorithm, ordering_iterations=3)
        first = command.execute(mixed_parts, parameters)
        second = command.execute(mixed_parts, parameters)
        assert first.to_dict() == second.to_dict()

    def test_groups_in_discovery_order(self, command, mixed_parts, mixed_parameters) -> None:
        result = command.execute(mixed_parts, mixed_parameters)
        assert [g.material_key.label for g in result.groups] == ["S355_8mm", "SS400_6mm"]

    def test_workers_give_identical_plan(self, command, mixed_parts, mixed_parameters) -> None:
        sequential = command.execute(mixed_parts, mixed_parameters)
        threaded = command.execute(mixed_parts, replace(mixed_parameters, workers=2))
        assert sequential.to_dict() == threaded.to_dict()

    def test_coil_width_is_a_candidate(self, command, mixed_parts, mixed_parameters) -> None:
        result = command.execute(mixed_parts, mixed_parameters)
        for group in result.groups:
            assert group.coil_width in mixed_parameters.candidate_coil_widths


class TestSingleSheetWaste:
    """Waste of a group that fits on one sheet, with kerf-free rows."""

    @pytest.fixture
    def parameters(self) -> NestingParameters:
        return NestingParameters(
            kerf=0,
            candidate_coil_widths=(1000, 1500),
            roll_weight_range=WeightRange(min=1, max=5500),
        )

    @pytest.fixture
    def parts(self) -> list[Part]:
        return [
            Part("A", 1000, 2000, 1, 2, "SS400"),
            Part("B", 500, 2000, 1, 2, "SS400"),
            Part("C", 500, 1600, 1, 2, "SS400"),
        ]

    def test_full_order(self, command, parts, parameters) -> None:
        result = command.execute(parts, parameters)

        group = result.groups[0]
        assert group.coil_width == 1000
        assert [layout.length for layout in group.layouts] == [4000]
        assert result.summary.overall_waste_percentage == pytest.approx(5.0)

    def test_dropping_part_that_fills_the_row_raises_waste(self, command, parts, parameters) -> None:
        # B and C need a 2000 mm sheet at least 1000 mm wide, so 10 % is the
        # best any layout of them can do on these coils
        result = command.execute(parts[1:], parameters)

        group = result.groups[0]
        assert group.coil_width == 1000
        assert [layout.length for layout in group.layouts] == [2000]
        assert result.summary.overall_waste_percentage == pytest.approx(10.0)

    def test_dropping_the_shortest_part_lowers_waste(self, command, parts, parameters) -> None:
        result = command.execute(parts[:2], parameters)

        assert result.groups[0].coil_width == 1500
        assert result.summary.overall_waste_percentage == pytest.approx(0.0)


class TestBalancing:
    """Balancing on sheets closed by the packer."""

    @pytest.fixture
    def parts(self) -> list[Part]:
        return [
            Part("A", 700, 1200, 1, 2, "SS400"),
            Part("B", 300, 300, 1, 2, "SS400"),
            Part("strip", 290, 2000, 1, 2, "SS400"),
        ]

    def _parameters(self, algorithm: NestingAlgorithm) -> NestingParameters:
        return NestingParameters(
            max_sheet_length=2000,
            kerf=0,
            candidate_coil_widths=(1000,),
            roll_weight_range=WeightRange(min=1, max=5500),
            algorithm=algorithm,
        )

    def test_last_sheet_folded_into_first(self, command, parts) -> None:
        parameters = self._parameters(NestingAlgorithm.BZ12)
        result = command.execute(parts, parameters)

        _check_plan(result, parameters)
        layouts = result.groups[0].layouts
        assert [layout.piece_count for layout in layouts] == [3]
        assert layouts[0].is_last

    def test_standard_does_not_balance(self, command, parts) -> None:
        result = command.execute(parts, self._parameters(NestingAlgorithm.STANDARD))
        assert [layout.piece_count for layout in result.groups[0].layouts] == [2, 1]


@pytest.mark.slow
class TestRuntime:
    """A few hundred pieces with the default constraints."""

    def test_three_hundred_pieces(self, command) -> None:
        rng = random.Random(20)
        parts = [
            Part(
                f"P{n}",
                rng.randint(150, 1400),
                rng.randint(300, 6000),
                5,
                6,
                "S355",
            )
            for n in range(60)
        ]

        started = time.perf_counter()
        result = command.execute(parts, NestingParameters())
        elapsed = time.perf_counter() - started

        unplaced = sum(u.instances for u in result.unplaceable_parts)
        assert result.summary.total_parts_nested + unplaced == 300
        assert elapsed < 30


class TestUnplaceableParts:
    """Pieces that cannot be nested at all."""

    @pytest.mark.parametrize("algorithm", ALL_ALGORITHMS)
    def test_part_longer_than_max_sheet_length(self, command, single_width_parameters, algorithm) -> None:
        parts = [
            Part("long", 1000, 20000, 1, 2, "SS400"),
            Part("ok", 1000, 2500, 2, 2, "SS400"),
        ]
        result = command.execute(parts, replace(single_width_parameters, algorithm=algorithm))

        assert [(u.part_id, u.reason) for u in result.unplaceable_parts] == [
            ("long", "exceeds_max_sheet_length")
        ]
        assert "long" not in _nested_ids(result)
        assert result.summary.total_parts_nested == 2
        assert any(w.code == WarningCode.UNPLACEABLE_PART for w in result.warnings)

    def test_part_wider_than_every_coil(self, command, single_width_parameters) -> None:
        parts = [Part("huge", 1600, 1700, 3, 2, "SS400")]
        result = command.execute(parts, single_width_parameters)

        assert result.unplaceable_parts[0].instances == 3
        assert result.unplaceable_parts[0].reason == "exceeds_coil_width"
        assert result.groups[0].coil_width is None
        assert result.summary.overall_waste_percentage == 0


class TestInvalidInput:
    """Invalid parts abort the run."""

    def test_all_offending_ids_reported(self, command, single_width_parameters) -> None:
        parts = [
            Part("ok", 1000, 2500, 1, 2, "SS400"),
            Part("bad-width", 0, 2500, 1, 2, "SS400"),
            Part("bad-qty", 1000, 2500, 0, 2, "SS400"),
        ]
        with pytest.raises(InputInvalidError) as exc_info:
            command.execute(parts, single_width_parameters)
        assert exc_info.value.part_ids == ["bad-width", "bad-qty"]

    def test_empty_part_list(self, command, single_width_parameters) -> None:
        result = command.execute([], single_width_parameters)
        assert result.groups == ()
        assert result.summary.total_parts == 0
