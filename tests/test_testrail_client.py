# SPDX-FileCopyrightText: 2025 Taras Paruta (partarstu@gmail.com)
#
# SPDX-License-Identifier: Apache-2.0

"""Tests for the resource factories: argument validation and the requests they build."""

from datetime import date

import pytest

from testrail_api.errors import InvalidArgumentError
from testrail_api.models import (Case, CaseField, ConfigurationGroup, Milestone, Plan, PlanEntry, Project, Result,
                                 ResultStatus, Run, Section, Suite, Test, User)
from testrail_api.services.request import HttpMethod, RequestState, ResponseShape
from testrail_api.services.testrail_client import TestRail
from testrail_api.services.testrail_client_provider import get_testrail_client
from testrail_api.services.testrail_config import TestRailConfig


class TestArgumentValidation:

    @pytest.mark.parametrize("project_id", [0, -1, None, "1", True])
    def test_project_id_must_be_positive(self, testrail: TestRail, project_id) -> None:
        with pytest.raises(InvalidArgumentError):
            testrail.projects().get(project_id)

    def test_invalid_argument_is_a_value_error(self, testrail: TestRail) -> None:
        with pytest.raises(ValueError):
            testrail.runs().get(0)

    def test_bulk_results_cannot_be_empty(self, testrail: TestRail) -> None:
        with pytest.raises(InvalidArgumentError):
            testrail.results().add_list(3, [])
        with pytest.raises(InvalidArgumentError):
            testrail.results().add_list_for_cases(3, [])

    def test_bulk_results_must_be_results(self, testrail: TestRail) -> None:
        with pytest.raises(InvalidArgumentError):
            testrail.results().add_list(3, [Result(test_id=1), Case(title="x")])

    def test_update_requires_an_id(self, testrail: TestRail) -> None:
        with pytest.raises(InvalidArgumentError):
            testrail.cases().update(Case(title="No id"))

    def test_model_is_required(self, testrail: TestRail) -> None:
        with pytest.raises(InvalidArgumentError):
            testrail.projects().add(None)

    def test_model_type_is_checked(self, testrail: TestRail) -> None:
        with pytest.raises(InvalidArgumentError):
            testrail.runs().add(1, Plan(name="Not a run"))

    @pytest.mark.parametrize("email", [None, "", "   "])
    def test_email_is_required(self, testrail: TestRail, email) -> None:
        with pytest.raises(InvalidArgumentError):
            testrail.users().get_by_email(email)

    @pytest.mark.parametrize("entry_id", [None, "", "  "])
    def test_plan_entry_id_is_required(self, testrail: TestRail, entry_id) -> None:
        with pytest.raises(InvalidArgumentError):
            testrail.plans().delete_entry(1, entry_id)

    def test_suite_id_is_validated_when_given(self, testrail: TestRail) -> None:
        with pytest.raises(InvalidArgumentError):
            testrail.sections().list(1, suite_id=0)


class TestBuiltRequests:

    def test_get_project(self, testrail: TestRail) -> None:
        request = testrail.projects().get(5)

        assert request.state is RequestState.BUILT
        assert request.descriptor.method is HttpMethod.GET
        assert request.descriptor.path == "get_project/5"
        assert request.descriptor.shape is ResponseShape.SINGLE
        assert request.descriptor.response_type is Project

    def test_list_cases_with_suite(self, testrail: TestRail) -> None:
        request = testrail.cases().list(1, suite_id=2, section_id=9)

        assert request.url.endswith("get_cases/1&suite_id=2&section_id=9")
        assert request.descriptor.shape is ResponseShape.LIST
        assert request.descriptor.list_key == "cases"

    def test_add_case_body_contains_only_title(self, testrail: TestRail) -> None:
        request = testrail.cases().add(12, Case(title="Checkout with voucher"))

        assert request.descriptor.path == "add_case/12"
        assert request.payload == {"title": "Checkout with voucher"}

    def test_delete_has_no_response(self, testrail: TestRail) -> None:
        request = testrail.suites().delete(Suite.hydrate({"id": 4, "name": "Smoke"}))

        assert request.descriptor.method is HttpMethod.POST
        assert request.descriptor.path == "delete_suite/4"
        assert request.descriptor.shape is ResponseShape.NONE
        assert request.payload is None

    def test_close_run(self, testrail: TestRail) -> None:
        request = testrail.runs().close(Run.hydrate({"id": 81}))

        assert request.descriptor.path == "close_run/81"
        assert request.descriptor.response_type is Run
        assert request.payload is None

    def test_plan_entries(self, testrail: TestRail) -> None:
        entry = PlanEntry.hydrate({"id": "3933d74b", "suite_id": 1})
        entry.name = "Renamed"

        update = testrail.plans().update_entry(80, entry)
        delete = testrail.plans().delete_entry(80, "3933d74b")
        add = testrail.plans().add_entry(80, PlanEntry(suite_id=1, include_all=True))

        assert update.descriptor.path == "update_plan_entry/80/3933d74b"
        assert update.payload == {"name": "Renamed"}
        assert delete.descriptor.path == "delete_plan_entry/80/3933d74b"
        assert add.descriptor.response_type is PlanEntry
        assert add.payload == {"suite_id": 1, "include_all": True}

    def test_results_paths(self, testrail: TestRail) -> None:
        assert testrail.results().list(4).descriptor.path == "get_results/4"
        assert testrail.results().list_for_run(7).descriptor.path == "get_results_for_run/7"
        assert testrail.results().list_for_case(7, 3).descriptor.path == "get_results_for_case/7/3"
        assert testrail.results().add(4, Result(status_id=1)).descriptor.path == "add_result/4"
        assert testrail.results().add_for_case(7, 3, Result(status_id=1)).descriptor.path == \
               "add_result_for_case/7/3"

    def test_bulk_results_for_cases(self, testrail: TestRail) -> None:
        request = testrail.results().add_list_for_cases(7, [Result(case_id=1, status_id=5)])

        assert request.descriptor.path == "add_results_for_cases/7"
        assert request.descriptor.shape is ResponseShape.LIST
        assert request.payload == {"results": [{"case_id": 1, "status_id": 5}]}

    def test_user_by_email(self, testrail: TestRail) -> None:
        request = testrail.users().get_by_email(" qa@example.com ")

        assert request.url.endswith("get_user_by_email&email=qa%40example.com")
        assert request.descriptor.response_type is User

    def test_tests_filtered_by_status(self, testrail: TestRail) -> None:
        request = testrail.tests().list(81, status_id=[4, 5])

        assert request.url.endswith("get_tests/81&status_id=4,5")
        assert request.descriptor.response_type is Test

    def test_entry_taken_from_hydrated_plan_updates_only_its_change(self, testrail: TestRail) -> None:
        plan = Plan.hydrate({"id": 7, "name": "Release", "entries": [
            {"id": "abc", "suite_id": 1, "name": "E", "include_all": True, "runs": [{"id": 81, "name": "E"}]}]})
        entry = plan.entries[0]
        entry.name = "Renamed"

        request = testrail.plans().update_entry(7, entry)

        assert request.payload == {"name": "Renamed"}

    def test_named_filters_are_encoded(self, testrail: TestRail) -> None:
        request = testrail.runs().list(3, created_after=date(2024, 1, 1), is_completed=True, suite_id=[1, 2])

        assert request.url.endswith("get_runs/3&created_after=1704067200&is_completed=1&suite_id=1,2")

    def test_results_for_run_filters(self, testrail: TestRail) -> None:
        request = testrail.results().list_for_run(7, created_by=[4], status_id=[ResultStatus.FAILED])

        assert request.url.endswith("get_results_for_run/7&created_by=4&status_id=5")

    @pytest.mark.parametrize("factory", [
        lambda client: client.cases().list(1, created_afterr=date(2024, 1, 1)),
        lambda client: client.projects().list(completed=True),
        lambda client: client.plans().list(3, status_id=[1]),
        lambda client: client.results().list(4, created_by=[1]),
    ])
    def test_unknown_filters_are_rejected(self, testrail: TestRail, factory) -> None:
        with pytest.raises(TypeError):
            factory(testrail)

    @pytest.mark.parametrize("factory, path, response_type", [
        (lambda client: client.case_fields().list(), "get_case_fields", CaseField),
        (lambda client: client.configurations().list(3), "get_configs/3", ConfigurationGroup),
        (lambda client: client.milestones().list(3, is_completed=False), "get_milestones/3", Milestone),
        (lambda client: client.sections().get(8), "get_section/8", Section),
        (lambda client: client.plans().list(3), "get_plans/3", Plan),
    ])
    def test_paths_and_types(self, testrail: TestRail, factory, path, response_type) -> None:
        request = factory(testrail)

        assert request.descriptor.path == path
        assert request.descriptor.response_type is response_type


class TestClient:

    def test_config_is_required(self) -> None:
        with pytest.raises(InvalidArgumentError):
            TestRail(None)

    def test_provider_uses_given_config(self, testrail_config: TestRailConfig) -> None:
        client = get_testrail_client(testrail_config)

        assert client.config is testrail_config

    def test_factories_share_the_config(self, testrail: TestRail) -> None:
        assert testrail.projects().config is testrail.config
        assert testrail.results().config is testrail.config
