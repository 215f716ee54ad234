"""Tests for moving parts off the last sheet."""

from __future__ import annotations

from dataclasses import replace

from coilnest.domain import NestingAlgorithm, PartInstance, WeightRange, group_parts
from coilnest.infrastructure import (
    BalanceReport,
    InterSheetBalancer,
    NestedPart,
    NestingParameters,
    SheetPacker,
    SheetState,
    WeightLengthGovernor,
    WidthSelector,
)


def _balancer(parameters: NestingParameters) -> InterSheetBalancer:
    governor = WeightLengthGovernor(parameters)
    return InterSheetBalancer(parameters, SheetPacker(parameters, governor), governor)


def _sheets(make_part) -> list[SheetState]:
    """A sparse first sheet and a last sheet holding two small pieces."""
    first = SheetState(width=1500, thickness=2)
    first.add(NestedPart(instance=PartInstance(make_part(id="big")), x=0, y=0))

    small = make_part(id="small", width=400, length=1000, quantity=2)
    last = SheetState(width=1500, thickness=2)
    last.add(NestedPart(instance=PartInstance(small, 1), x=0, y=0))
    last.add(NestedPart(instance=PartInstance(small, 2), x=405, y=0))
    return [first, last]


class TestInterSheetBalancer:
    """Tests for InterSheetBalancer."""

    def test_single_sheet_untouched(self, make_part, light_window_parameters) -> None:
        sheets = _sheets(make_part)[:1]
        report = _balancer(light_window_parameters).balance(sheets)
        assert report == BalanceReport()
        assert len(sheets) == 1

    def test_moves_pieces_and_drops_empty_last_sheet(self, make_part, light_window_parameters) -> None:
        balancer = _balancer(light_window_parameters)
        sheets = _sheets(make_part)
        balancer.governor.finalize(sheets)

        report = balancer.balance(sheets)

        assert len(sheets) == 1
        assert report.moves == 2
        assert report.sheets_removed == 1
        assert report.converged
        ids = sorted(p.instance_id for p in sheets[0].placements)
        assert ids == ["big", "small#1", "small#2"]
        # The remaining sheet is now the last one and cut after its parts
        assert sheets[0].cut_length == sheets[0].content_length

    def test_sheet_at_target_is_left_alone(self, make_part, light_window_parameters) -> None:
        params = replace(light_window_parameters, target_utilization=0.3)
        balancer = _balancer(params)
        sheets = _sheets(make_part)
        balancer.governor.finalize(sheets)

        report = balancer.balance(sheets)

        assert report.moves == 0
        assert report.passes == 1
        assert len(sheets) == 2

    def test_pass_cap_reports_non_convergence(self, make_part, light_window_parameters) -> None:
        params = replace(light_window_parameters, max_balancing_passes=1)
        balancer = _balancer(params)
        sheets = _sheets(make_part)
        balancer.governor.finalize(sheets)

        report = balancer.balance(sheets)

        assert not report.converged
        assert report.passes == 1

    def test_move_never_exceeds_weight_ceiling(self, make_part, light_window_parameters) -> None:
        balancer = _balancer(light_window_parameters)
        first = SheetState(width=1500, thickness=2)
        first.add(NestedPart(instance=PartInstance(make_part(id="a", length=8000)), x=0, y=0))
        last = SheetState(width=1500, thickness=2)
        last.add(NestedPart(instance=PartInstance(make_part(id="b", length=1000)), x=0, y=0))
        sheets = [first, last]
        balancer.governor.finalize(sheets)

        report = balancer.balance(sheets)

        assert report.moves == 0
        assert len(sheets) == 2


# =============================================================================
# Balancing packed plans
# =============================================================================


class TestBalancingPackedPlans:
    """Balancing applied to sheets produced by the packer."""

    def _parameters(self, algorithm: NestingAlgorithm = NestingAlgorithm.BZ12) -> NestingParameters:
        return NestingParameters(
            max_sheet_length=2000,
            kerf=0,
            candidate_coil_widths=(1000,),
            roll_weight_range=WeightRange(min=1, max=5500),
            algorithm=algorithm,
        )

    def _parts(self, make_part):
        # The packer closes the first sheet with A and B side by side, which
        # leaves no room for the strip; packing the strip first fits all three
        return [
            make_part(id="A", width=700, length=1200),
            make_part(id="B", width=300, length=300),
            make_part(id="strip", width=290, length=2000),
        ]

    def test_closed_sheet_is_repacked_to_take_last_sheet_part(self, make_part) -> None:
        params = self._parameters()
        group = group_parts(self._parts(make_part), params.max_sheet_length)[0]
        selector = WidthSelector(params)

        unbalanced = selector.evaluate(group.instances, 1000, 2)
        assert [len(s.placements) for s in unbalanced.sheets] == [2, 1]

        plan = selector.plan(group.instances, 1000, 2)

        assert plan.balance.moves == 1
        assert plan.balance.sheets_removed == 1
        assert len(plan.sheets) == 1
        positions = sorted((p.instance_id, p.x, p.y) for p in plan.sheets[0].placements)
        assert positions == [("A", 290, 0), ("B", 290, 1200), ("strip", 0, 0)]
        assert plan.sheets[0].cut_length == 2000

    def test_standard_keeps_packer_sheets(self, make_part) -> None:
        params = self._parameters(NestingAlgorithm.STANDARD)
        group = group_parts(self._parts(make_part), params.max_sheet_length)[0]

        plan = WidthSelector(params).plan(group.instances, 1000, 2)

        assert plan.balance == BalanceReport()
        assert len(plan.sheets) == 2

    def test_last_sheet_shrinks_after_parts_leave(self, make_part, light_window_parameters) -> None:
        balancer = _balancer(light_window_parameters)
        first = SheetState(width=1500, thickness=2)
        first.add(NestedPart(instance=PartInstance(make_part(id="big")), x=0, y=0))
        last = SheetState(width=1500, thickness=2)
        small = make_part(id="small", width=400, length=1000)
        tall = make_part(id="tall", width=1500, length=7000)
        last.add(NestedPart(instance=PartInstance(tall), x=0, y=0))
        last.add(NestedPart(instance=PartInstance(small), x=0, y=7005))
        sheets = [first, last]
        balancer.governor.finalize(sheets)

        report = balancer.balance(sheets)

        assert report.moves == 1
        assert [p.instance_id for p in sheets[0].placements] == ["big", "small"]
        assert sheets[1].content_length == 7000
        assert sheets[1].cut_length == 7000
