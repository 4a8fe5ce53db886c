"""
Property Tests for Reconstitution Contracts
Verifies numbering, ordering, merge and selection invariants.
"""

from hypothesis import given, settings, strategies as st
from hypothesis.strategies import composite

from reconstitute.config import HarvestConfig
from reconstitute.contracts.records import Category, Group, RawRecord, Record
from reconstitute.extraction.window import SnapshotWindowSource
from reconstitute.harvest import Harvester, merge_record, number_records, order_groups
from reconstitute.selection import select_subset


# =============================================================================
# STRATEGIES (Generators)
# =============================================================================

ROLES = st.sampled_from(["user", "assistant", "tool", "system"])
NAMES = st.text(alphabet="abcdefgh", min_size=1, max_size=4).map(lambda s: s + ".txt")


@composite
def conversations(draw):
    """Raw records for turns with unique (optional) order hints."""
    n_groups = draw(st.integers(min_value=1, max_value=12))
    orders = draw(st.lists(st.integers(min_value=0, max_value=500),
                           min_size=n_groups, max_size=n_groups, unique=True))
    has_order = draw(st.lists(st.booleans(), min_size=n_groups, max_size=n_groups))

    records = []
    for g in range(n_groups):
        group_id = f"turn-{g}"
        order = orders[g] if has_order[g] else None
        for m in range(draw(st.integers(min_value=1, max_value=3))):
            records.append(RawRecord(
                role=draw(ROLES),
                group_id=group_id,
                identity=f"{group_id}-m{m}",
                group_order=order,
                plain_text=f"message {g}.{m}",
            ))
    return records


@composite
def windows(draw):
    """Window geometry where every step reveals at least one new row."""
    row_height = draw(st.integers(min_value=10, max_value=50))
    viewport = draw(st.integers(min_value=100, max_value=400))
    overscan = draw(st.integers(min_value=0, max_value=100))
    return dict(row_height=row_height, viewport=viewport, overscan=overscan)


@composite
def groups(draw):
    """Store groups with unique discovery orders and optional order hints."""
    n = draw(st.integers(min_value=0, max_value=15))
    hints = draw(st.lists(st.one_of(st.none(), st.integers(min_value=0, max_value=20)),
                          min_size=n, max_size=n))
    result = []
    for discovery, hint in enumerate(hints):
        group = Group(group_id=f"g{discovery}", discovery_order=discovery, group_order=hint)
        for i, role in enumerate(draw(st.lists(ROLES, min_size=1, max_size=4))):
            identity = f"g{discovery}-{i}"
            group.records[identity] = Record(
                identity=identity, role=role, category=Category.from_role(role), group_id=group.group_id
            )
        result.append(group)
    return result


def _harvest(records, geometry):
    source = SnapshotWindowSource(records, **geometry)
    config = HarvestConfig(stall_limit=6, confirm_stall=2)
    return Harvester(source, config=config, sleep=lambda _: None).run()


# =============================================================================
# HARVEST PROPERTIES
# =============================================================================

@settings(max_examples=60, deadline=None)
@given(conversations(), windows())
def test_harvest_recovers_every_record_exactly_once(records, geometry):
    report = _harvest(records, geometry)
    assert report.converged
    assert sorted(r.identity for r in report.records) == sorted(r.identity for r in records)


@settings(max_examples=60, deadline=None)
@given(conversations(), windows())
def test_global_index_is_contiguous(records, geometry):
    numbered = _harvest(records, geometry).records
    assert [r.global_index for r in numbered] == list(range(1, len(numbered) + 1))


@settings(max_examples=60, deadline=None)
@given(conversations(), windows())
def test_category_indices_and_running_totals_agree(records, geometry):
    numbered = _harvest(records, geometry).records
    users = assistants = 0
    for record in numbered:
        if record.category is Category.USER:
            users += 1
            assert record.category_index == users
        elif record.category is Category.ASSISTANT:
            assistants += 1
            assert record.category_index == assistants
        else:
            assert record.category_index is None
        assert record.running_totals.user == users
        assert record.running_totals.assistant == assistants


@settings(max_examples=60, deadline=None)
@given(conversations(), windows())
def test_ordered_groups_precede_unordered_groups(records, geometry):
    numbered = _harvest(records, geometry).records
    hints = [r.group_order for r in numbered]
    first_unordered = next((i for i, h in enumerate(hints) if h is None), len(hints))
    ordered = hints[:first_unordered]
    assert all(h is None for h in hints[first_unordered:])
    assert ordered == sorted(ordered)


@settings(max_examples=60, deadline=None)
@given(conversations(), windows())
def test_groups_stay_contiguous(records, geometry):
    numbered = _harvest(records, geometry).records
    seen = []
    for record in numbered:
        if not seen or seen[-1] != record.group_id:
            assert record.group_id not in seen
            seen.append(record.group_id)


# =============================================================================
# ORDERING PROPERTIES
# =============================================================================

@given(groups())
def test_categories_are_ordered_inside_each_group(store):
    numbered = number_records(order_groups(store))
    rank = {Category.USER: 0, Category.ASSISTANT: 1, Category.OTHER: 2}
    for group in store:
        ranks = [rank[r.category] for r in numbered if r.group_id == group.group_id]
        assert ranks == sorted(ranks)


@given(groups())
def test_ordering_is_independent_of_input_order(store):
    forward = [g.group_id for g in order_groups(store)]
    backward = [g.group_id for g in order_groups(list(reversed(store)))]
    assert forward == backward


# =============================================================================
# MERGE PROPERTIES
# =============================================================================

@given(
    st.lists(NAMES, max_size=5),
    st.lists(NAMES, max_size=5),
    st.text(max_size=30),
    st.text(max_size=30),
)
def test_merge_never_loses_information(first_names, second_names, first_text, second_text):
    record = Record(identity="m", role="user", category=Category.USER, group_id="t",
                    plain_text=first_text, attachments=list(dict.fromkeys(first_names)))
    merge_record(record, RawRecord(role="user", group_id="t", plain_text=second_text,
                                   attachments=tuple(second_names)))

    assert set(first_names) | set(second_names) <= set(record.attachments)
    assert len(record.attachments) == len(set(record.attachments))
    assert len(record.plain_text.strip()) == max(len(first_text.strip()), len(second_text.strip()))


# =============================================================================
# SELECTION PROPERTIES
# =============================================================================

@given(conversations(), st.lists(st.integers(min_value=1, max_value=40), min_size=1, max_size=10))
@settings(deadline=None)
def test_selection_accounts_for_every_record(records, picks):
    numbered = _harvest(records, dict(row_height=10, viewport=100, overscan=0)).records
    result = select_subset(numbered, ",".join(str(p) for p in picks))

    assert result.stats.kept + result.stats.removed == result.stats.total == len(numbered)
    assert [a.selection_position for a in result.kept] == list(range(1, len(result.kept) + 1))
    assert all(a.selection_total == len(result.kept) for a in result.kept)
    assert {a.original_index for a in result.kept} == set(picks) & {r.global_index for r in numbered}


@given(conversations(), st.integers(min_value=1, max_value=40))
@settings(deadline=None)
def test_recropping_with_present_indices_is_idempotent(records, n):
    numbered = _harvest(records, dict(row_height=10, viewport=100, overscan=0)).records
    first = select_subset(numbered, f"1-{n}")
    if not first.kept:
        return
    spec = ",".join(str(a.original_index) for a in first.kept)
    second = select_subset(first.kept, spec)

    assert [a.record for a in second.kept] == [a.record for a in first.kept]
    assert [a.selection_position for a in second.kept] == [a.selection_position for a in first.kept]
    assert second.stats.removed == 0
