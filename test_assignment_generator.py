# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""
Lab Assignment Service — Core Unit Tests
=========================================
Pure-logic tests: randomness, normalization, generator, statistics,
role repair and report reassignment planning. No HTTP, no database.

Run:  pytest test_assignment_generator.py -v
"""

from collections import Counter

import pytest

from labassign.models.domain import (
    Assignment,
    AssignmentConfig,
    CandidateUser,
    ConfigurationError,
    Lab,
    LabMembership,
    LabUser,
    ReportRecord,
)
from labassign.services.assignment_generator import (
    assistant_weight,
    build_role_sequence,
    generate_assignments,
    validate_config,
)
from labassign.services.assignment_stats import summarize
from labassign.services.normalization import (
    normalize_lab,
    normalize_membership,
    normalize_user,
    unwrap_collection,
    unwrap_record,
)
from labassign.services.randomness import (
    SequenceRandomSource,
    SystemRandomSource,
    choice,
    rand_int,
    shuffled,
)
from labassign.services.report_reassignment import (
    count_by_role,
    plan_reassignments,
    select_candidates,
)
from labassign.services.role_repair import plan_role_repair, role_for_position


# ── Helpers ──────────────────────────────────────────────────────────────
def _labs(n, activity=None):
    return [Lab(id=f"lab-{i}", name=f"Lab {i}", activity=activity) for i in range(n)]


def _users(n, activity=None):
    return [
        LabUser(id=f"user-{i}", name=f"User {i}", email=f"user{i}@fpt.edu.vn", activity=activity)
        for i in range(n)
    ]


def _by_lab(assignments):
    grouped = {}
    for a in assignments:
        grouped.setdefault(a.lab_id, []).append(a)
    return grouped


def _assignment(lab_id, user_id, role="Member", status="Active"):
    return Assignment(
        lab_id=lab_id, lab_name=lab_id, user_id=user_id, user_name=user_id,
        user_email=f"{user_id}@fpt.edu.vn", role=role, status=status,
    )


# ═══════════════════════════════════════════════════════════════════════════
# RANDOMNESS
# ═══════════════════════════════════════════════════════════════════════════
class TestRandomness:
    def test_sequence_source_replays_and_cycles(self):
        src = SequenceRandomSource([0.1, 0.2])
        assert [src.next_float() for _ in range(5)] == [0.1, 0.2, 0.1, 0.2, 0.1]

    def test_sequence_source_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            SequenceRandomSource([1.0])
        with pytest.raises(ValueError):
            SequenceRandomSource([])

    def test_rand_int_bounds(self):
        assert rand_int(SequenceRandomSource([0.0]), 2, 5) == 2
        assert rand_int(SequenceRandomSource([0.99]), 2, 5) == 5
        assert rand_int(SequenceRandomSource([0.5]), 3, 3) == 3

    def test_rand_int_empty_range(self):
        with pytest.raises(ValueError):
            rand_int(SequenceRandomSource([0.5]), 5, 2)

    def test_shuffle_is_fisher_yates_on_a_copy(self):
        items = ["a", "b", "c", "d"]
        result = shuffled(items, SequenceRandomSource([0.0]))
        assert result == ["b", "c", "d", "a"]
        assert items == ["a", "b", "c", "d"]

    def test_shuffle_is_a_permutation(self):
        items = list(range(50))
        result = shuffled(items, SystemRandomSource(3))
        assert sorted(result) == items

    def test_shuffle_reaches_every_position(self):
        first_positions = Counter()
        for seed in range(300):
            first_positions[shuffled(["a", "b", "c"], SystemRandomSource(seed))[0]] += 1
        assert set(first_positions) == {"a", "b", "c"}
        assert min(first_positions.values()) > 60

    def test_choice(self):
        assert choice(["x", "y", "z"], SequenceRandomSource([0.5])) == "y"
        with pytest.raises(ValueError):
            choice([], SequenceRandomSource([0.5]))

    def test_seeded_sources_agree(self):
        a, b = SystemRandomSource(11), SystemRandomSource(11)
        assert [a.next_float() for _ in range(5)] == [b.next_float() for _ in range(5)]


# ═══════════════════════════════════════════════════════════════════════════
# NORMALIZATION
# ═══════════════════════════════════════════════════════════════════════════
class TestNormalization:
    def test_pascal_case_lab(self):
        lab = normalize_lab({"Id": 7, "Name": "AI Lab", "Status": 0})
        assert lab.id == "7"
        assert lab.name == "AI Lab"
        assert lab.activity == "active"
        assert lab.is_active

    def test_camel_case_lab_inactive(self):
        lab = normalize_lab({"id": "abc", "name": "Cloud Lab", "status": 1})
        assert lab.activity == "inactive"
        assert not lab.is_active

    def test_lab_maintenance_string_and_code(self):
        assert normalize_lab({"id": "a", "status": "Maintenance"}).activity == "maintenance"
        assert normalize_lab({"id": "a", "status": 2}).activity == "maintenance"
        assert not normalize_lab({"id": "a", "status": 2}).is_active

    def test_missing_status_counts_as_active(self):
        lab = normalize_lab({"id": "a", "name": "x"})
        assert lab.activity is None
        assert lab.is_active

    def test_numeric_string_status(self):
        assert normalize_user({"Id": "u", "Status": "1"}).activity == "inactive"

    def test_user_name_fallbacks(self):
        assert normalize_user({"Id": "u", "Fullname": "Nguyen An"}).name == "Nguyen An"
        assert normalize_user({"id": "u", "username": "an.nguyen"}).name == "an.nguyen"
        assert normalize_user({"id": "u", "Username": "an", "fullname": ""}).name == "an"

    def test_user_email_and_status(self):
        user = normalize_user({"Id": "u1", "Email": "an@fpt.edu.vn", "Status": "Active"})
        assert user.email == "an@fpt.edu.vn"
        assert user.is_active

    def test_missing_id_raises(self):
        with pytest.raises(ValueError):
            normalize_lab({"name": "No id"})
        with pytest.raises(ValueError):
            normalize_user({"email": "x@y.z"})

    def test_membership(self):
        m = normalize_membership({"Id": "m1", "UserId": "u1", "Fullname": "An"})
        assert (m.id, m.user_id, m.name) == ("m1", "u1", "An")
        assert normalize_membership({"id": "m2"}).name == "Unknown"

    @pytest.mark.parametrize("payload", [
        [{"id": 1}],
        {"Data": [{"id": 1}]},
        {"data": {"items": [{"id": 1}]}},
        {"Data": {"Items": [{"id": 1}]}},
        {"items": [{"id": 1}]},
    ])
    def test_unwrap_collection_shapes(self, payload):
        assert unwrap_collection(payload) == [{"id": 1}]

    def test_unwrap_collection_empty_and_invalid(self):
        assert unwrap_collection(None) == []
        assert unwrap_collection({"Data": None}) == []
        with pytest.raises(ValueError):
            unwrap_collection("not a list")

    def test_unwrap_record(self):
        assert unwrap_record({"Data": {"Id": "m1"}}) == {"Id": "m1"}
        assert unwrap_record({"id": "m1"}) == {"id": "m1"}
        with pytest.raises(ValueError):
            unwrap_record([1, 2])


# ═══════════════════════════════════════════════════════════════════════════
# CONFIG VALIDATION
# ═══════════════════════════════════════════════════════════════════════════
class TestConfigValidation:
    def test_default_config_is_valid(self):
        validate_config(AssignmentConfig())

    @pytest.mark.parametrize("overrides, fragment", [
        ({"min_per_group": 5, "max_per_group": 2}, "exceeds"),
        ({"min_per_group": -1}, "non-negative"),
        ({"max_per_group": -3, "min_per_group": -4}, "non-negative"),
        ({"assistant_cap": -1}, "assistant_cap"),
        ({"role_distribution": {"Lead": 0.5, "Assistant": 0.2, "Member": 0.2}}, "sum to 1"),
        ({"role_distribution": {"Lead": 0.5, "Owner": 0.5}}, "unknown keys"),
        ({"status_distribution": {"Active": 1.2, "Inactive": -0.2}}, "non-negative"),
        ({"status_distribution": {"Active": 0.5}}, "sum to 1"),
    ])
    def test_bad_config_raises(self, overrides, fragment):
        config = AssignmentConfig(**overrides)
        with pytest.raises(ConfigurationError, match=fragment):
            validate_config(config)

    def test_generator_fails_fast_on_bad_config(self):
        with pytest.raises(ConfigurationError):
            generate_assignments(_labs(2), _users(5), AssignmentConfig(min_per_group=4, max_per_group=1))

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)

    def test_assistant_weight(self):
        assert assistant_weight(AssignmentConfig()) == pytest.approx(0.35 / 0.80)
        cfg = AssignmentConfig(role_distribution={"Lead": 1.0})
        assert assistant_weight(cfg) == 0.0


# ═══════════════════════════════════════════════════════════════════════════
# ROLE SEQUENCE
# ═══════════════════════════════════════════════════════════════════════════
class TestRoleSequence:
    def test_lead_first_then_capped_assistants(self):
        roles = build_role_sequence(4, AssignmentConfig(), SequenceRandomSource([0.1]))
        assert roles == ["Lead", "Assistant", "Assistant", "Member"]

    def test_high_rolls_give_members(self):
        roles = build_role_sequence(3, AssignmentConfig(), SequenceRandomSource([0.9]))
        assert roles == ["Lead", "Member", "Member"]

    def test_zero_and_one_slot(self):
        src = SequenceRandomSource([0.1])
        assert build_role_sequence(0, AssignmentConfig(), src) == []
        assert build_role_sequence(1, AssignmentConfig(), src) == ["Lead"]

    def test_custom_assistant_cap(self):
        cfg = AssignmentConfig(assistant_cap=0)
        roles = build_role_sequence(5, cfg, SequenceRandomSource([0.0]))
        assert roles == ["Lead"] + ["Member"] * 4

    def test_cap_holds_for_long_sequences(self):
        roles = build_role_sequence(50, AssignmentConfig(), SystemRandomSource(5))
        assert roles.count("Lead") == 1
        assert roles.count("Assistant") <= 2


# ═══════════════════════════════════════════════════════════════════════════
# GENERATOR
# ═══════════════════════════════════════════════════════════════════════════
class TestGenerateAssignments:
    def test_exact_output_under_fixed_sequence(self):
        users = _users(3)
        cfg = AssignmentConfig(min_per_group=2, max_per_group=2)
        # shuffle (2 draws), target, one role roll, two status rolls
        src = SequenceRandomSource([0.0, 0.0, 0.5, 0.1, 0.5, 0.95])
        result = generate_assignments(_labs(1), users, cfg, src)
        assert [(a.user_id, a.role, a.status) for a in result] == [
            ("user-1", "Lead", "Active"),
            ("user-2", "Assistant", "Inactive"),
        ]
        assert result[0].lab_name == "Lab 0"
        assert result[0].user_email == "user1@fpt.edu.vn"

    def test_deterministic_with_same_seed(self):
        labs, users = _labs(4), _users(15)
        first = generate_assignments(labs, users, rng=SystemRandomSource(42))
        second = generate_assignments(labs, users, rng=SystemRandomSource(42))
        assert first == second

    def test_concrete_scenario_three_labs_ten_users(self):
        cfg = AssignmentConfig(min_per_group=2, max_per_group=5)
        for seed in range(100):
            result = generate_assignments(_labs(3), _users(10), cfg, SystemRandomSource(seed))
            assert len(result) <= 10
            assert max(Counter(a.user_id for a in result).values()) == 1
            for members in _by_lab(result).values():
                assert sum(1 for a in members if a.role == "Lead") == 1

    def test_invariants_across_seeds(self):
        cfg = AssignmentConfig(min_per_group=2, max_per_group=5)
        for seed in range(200):
            labs, users = _labs(6), _users(20)
            result = generate_assignments(labs, users, cfg, SystemRandomSource(seed))
            per_lab = _by_lab(result)
            assert len({a.user_id for a in result}) == len(result)
            for members in per_lab.values():
                assert len(members) <= cfg.max_per_group
                assert [a.role for a in members].count("Lead") == 1
                assert [a.role for a in members].count("Assistant") <= 2
                assert members[0].role == "Lead"
            if len(result) < len(users):
                # pool not exhausted: every lab reached its minimum
                assert len(per_lab) == len(labs)
                assert all(len(m) >= cfg.min_per_group for m in per_lab.values())

    def test_pool_exhaustion_is_partial_not_error(self):
        cfg = AssignmentConfig(min_per_group=3, max_per_group=3)
        result = generate_assignments(_labs(3), _users(4), cfg, SystemRandomSource(1))
        assert len(result) == 4
        counts = sorted(Counter(a.lab_id for a in result).values())
        assert counts == [1, 3]
        stats = summarize(result, min_per_group=cfg.min_per_group)
        assert len(stats.under_allocated_labs) == 1

    def test_inactive_labs_return_empty(self):
        assert generate_assignments(_labs(3, "inactive"), _users(5), rng=SystemRandomSource(0)) == []

    def test_inactive_users_return_empty(self):
        assert generate_assignments(_labs(3), _users(5, "inactive"), rng=SystemRandomSource(0)) == []

    def test_empty_inputs_return_empty(self):
        assert generate_assignments([], _users(5)) == []
        assert generate_assignments(_labs(2), []) == []

    def test_maintenance_labs_skipped(self):
        labs = [Lab(id="a", name="A", activity="maintenance"), Lab(id="b", name="B")]
        result = generate_assignments(labs, _users(5), rng=SystemRandomSource(2))
        assert {a.lab_id for a in result} == {"b"}

    def test_only_active_users_assigned(self):
        users = _users(4) + [LabUser(id="gone", name="Gone", activity="inactive")]
        cfg = AssignmentConfig(min_per_group=5, max_per_group=5)
        result = generate_assignments(_labs(1), users, cfg, SystemRandomSource(0))
        assert "gone" not in {a.user_id for a in result}
        assert len(result) == 4

    def test_duplicate_user_records_used_once(self):
        users = _users(3) + _users(3)
        cfg = AssignmentConfig(min_per_group=3, max_per_group=3)
        result = generate_assignments(_labs(2), users, cfg, SystemRandomSource(9))
        assert len(result) == 3
        assert len({a.user_id for a in result}) == 3

    def test_duplicate_lab_records_served_once(self):
        labs = [Lab(id="lab-a", name="A"), Lab(id="lab-a", name="A again"), Lab(id="lab-b", name="B")]
        cfg = AssignmentConfig(min_per_group=3, max_per_group=3)
        result = generate_assignments(labs, _users(10), cfg, SystemRandomSource(0))
        counts = Counter(a.lab_id for a in result)
        assert counts == {"lab-a": 3, "lab-b": 3}
        assert [a.role for a in result if a.lab_id == "lab-a"].count("Lead") == 1
        assert {a.lab_name for a in result if a.lab_id == "lab-a"} == {"A"}

    def test_lab_order_gets_first_pick(self):
        cfg = AssignmentConfig(min_per_group=4, max_per_group=4)
        result = generate_assignments(_labs(3), _users(5), cfg, SystemRandomSource(4))
        counts = Counter(a.lab_id for a in result)
        assert counts["lab-0"] == 4
        assert counts["lab-1"] == 1
        assert "lab-2" not in counts

    def test_inputs_not_mutated(self):
        labs, users = _labs(3), _users(10)
        labs_before = [lab.model_copy() for lab in labs]
        users_before = [u.model_copy() for u in users]
        generate_assignments(labs, users, rng=SystemRandomSource(0))
        assert labs == labs_before
        assert users == users_before

    def test_multi_group_allows_reuse_across_labs(self):
        cfg = AssignmentConfig(min_per_group=3, max_per_group=3, allow_multi_group=True)
        result = generate_assignments(_labs(3), _users(3), cfg, SystemRandomSource(8))
        assert len(result) == 9
        for members in _by_lab(result).values():
            assert len({a.user_id for a in members}) == 3
            assert [a.role for a in members].count("Lead") == 1

    def test_all_active_status_distribution(self):
        cfg = AssignmentConfig(status_distribution={"Active": 1.0, "Inactive": 0.0})
        result = generate_assignments(_labs(3), _users(12), cfg, SystemRandomSource(6))
        assert {a.status for a in result} == {"Active"}

    def test_zero_bounds_produce_nothing(self):
        cfg = AssignmentConfig(min_per_group=0, max_per_group=0)
        assert generate_assignments(_labs(2), _users(4), cfg, SystemRandomSource(0)) == []


# ═══════════════════════════════════════════════════════════════════════════
# STATISTICS
# ═══════════════════════════════════════════════════════════════════════════
class TestSummarize:
    def test_counts(self):
        items = [
            _assignment("a", "u1", "Lead"),
            _assignment("a", "u2", "Assistant", "Inactive"),
            _assignment("a", "u3"),
            _assignment("b", "u4", "Lead"),
            _assignment("c", "u5", "Lead"),
        ]
        stats = summarize(items, min_per_group=2)
        assert stats.total_assignments == 5
        assert stats.unique_users == 5
        assert stats.unique_labs == 3
        assert stats.by_role == {"Lead": 3, "Assistant": 1, "Member": 1}
        assert stats.by_status == {"Active": 4, "Inactive": 1}
        assert stats.avg_members_per_lab == 1.67
        assert stats.members_per_lab == {"a": 3, "b": 1, "c": 1}
        assert sorted(stats.under_allocated_labs) == ["b", "c"]

    def test_empty(self):
        stats = summarize([])
        assert stats.total_assignments == 0
        assert stats.avg_members_per_lab == 0
        assert stats.by_role == {"Lead": 0, "Assistant": 0, "Member": 0}
        assert stats.under_allocated_labs == []

    def test_without_minimum_no_under_allocation(self):
        stats = summarize([_assignment("a", "u1", "Lead")])
        assert stats.under_allocated_labs == []

    def test_consistency_with_generator(self):
        for seed in range(50):
            result = generate_assignments(_labs(5), _users(17), rng=SystemRandomSource(seed))
            stats = summarize(result)
            assert stats.total_assignments == len(result)
            assert sum(stats.by_role.values()) == stats.total_assignments
            assert sum(stats.by_status.values()) == stats.total_assignments
            assert stats.by_role["Lead"] == stats.unique_labs

    def test_idempotent_and_pure(self):
        items = [_assignment("a", "u1", "Lead"), _assignment("a", "u2")]
        snapshot = list(items)
        assert summarize(items) == summarize(items)
        assert items == snapshot


# ═══════════════════════════════════════════════════════════════════════════
# ROLE REPAIR
# ═══════════════════════════════════════════════════════════════════════════
class TestRoleRepair:
    def test_position_rules(self):
        assert role_for_position(0, 1) == "Lead"
        assert role_for_position(1, 2) == "Member"
        assert role_for_position(1, 3) == "Assistant"
        assert role_for_position(2, 3) == "Member"

    def test_plan_for_lab(self):
        members = [LabMembership(id=f"m{i}", name=f"M{i}") for i in range(4)]
        plan = plan_role_repair("lab-1", members, SequenceRandomSource([0.5, 0.95]))
        assert [u.role for u in plan] == ["Lead", "Assistant", "Member", "Member"]
        assert [u.status for u in plan] == ["Active", "Inactive", "Active", "Inactive"]
        assert all(u.lab_id == "lab-1" for u in plan)

    def test_two_member_lab_has_no_assistant(self):
        members = [LabMembership(id="m1"), LabMembership(id="m2")]
        plan = plan_role_repair("lab", members, SequenceRandomSource([0.1]))
        assert [u.role for u in plan] == ["Lead", "Member"]

    def test_empty_lab(self):
        assert plan_role_repair("lab", []) == []

    def test_bad_probability(self):
        with pytest.raises(ValueError):
            plan_role_repair("lab", [LabMembership(id="m")], active_probability=1.5)


# ═══════════════════════════════════════════════════════════════════════════
# REPORT REASSIGNMENT
# ═══════════════════════════════════════════════════════════════════════════
class TestReportReassignment:
    USERS = [
        CandidateUser(id="1", name="Admin A", role="Admin"),
        CandidateUser(id="2", name="Student B", role="Student"),
        CandidateUser(id="3", name="Lecturer C", role="Lecturer"),
        CandidateUser(id="4", name="Student D", role="Student"),
    ]

    REPORTS = [
        ReportRecord(id="r1", title="Broken projector", reporter_id="1",
                     reporter_name="Admin A", reporter_role="Admin"),
        ReportRecord(id="r2", title="Lab too cold", reporter_id="1",
                     reporter_name="Admin A", reporter_role="Admin"),
    ]

    def test_select_excludes_admin(self):
        ids = [u.id for u in select_candidates(self.USERS)]
        assert ids == ["2", "3", "4"]

    def test_select_by_role(self):
        ids = [u.id for u in select_candidates(self.USERS, role="Student")]
        assert ids == ["2", "4"]

    def test_plan_picks_from_candidates(self):
        candidates = select_candidates(self.USERS)
        plan = plan_reassignments(self.REPORTS, candidates, SequenceRandomSource([0.0, 0.99]))
        assert [p.new_reporter_id for p in plan] == ["2", "4"]
        assert plan[0].previous_reporter_role == "Admin"
        assert count_by_role(plan) == {"Student": 2}

    def test_plan_without_reports(self):
        assert plan_reassignments([], []) == []

    def test_plan_without_candidates_raises(self):
        with pytest.raises(ValueError):
            plan_reassignments(self.REPORTS, [])
