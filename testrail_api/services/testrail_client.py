# SPDX-FileCopyrightText: 2025 Taras Paruta (partarstu@gmail.com)
#
# SPDX-License-Identifier: Apache-2.0

from datetime import date
from typing import Any, List, Optional, Type

from testrail_api import utils
from testrail_api.errors import InvalidArgumentError
from testrail_api.models import (Case, CaseField, CaseType, ConfigurationGroup, Milestone, Plan, PlanEntry, Priority,
                                 Project, Result, ResultField, ResultList, Run, Section, Status, Suite, Test,
                                 TrackedModel, User)
from testrail_api.services.request import HttpMethod, Request, RequestDescriptor, ResponseShape
from testrail_api.services.testrail_config import TestRailConfig

logger = utils.get_logger(__name__)


def _require_positive(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidArgumentError(f"{name} should be positive, got {value!r}")
    return value


def _require_model(value: Any, model_type: Type[TrackedModel], name: str):
    if value is None:
        raise InvalidArgumentError(f"{name} cannot be None")
    if not isinstance(value, model_type):
        raise InvalidArgumentError(f"{name} should be a {model_type.__name__}, got {type(value).__name__}")


def _require_id(model: TrackedModel, name: str) -> int:
    return _require_positive(getattr(model, "id", None), f"{name}.id")


class _ResourceFactory:
    """Base of the per-resource factories, binds TestRail paths and model types to requests."""

    def __init__(self, config: TestRailConfig):
        self.config = config

    def _get(self, path: str, response_type: Type[TrackedModel], **params) -> Request:
        return self._request(HttpMethod.GET, path, ResponseShape.SINGLE, response_type, params=params)

    def _list(self, path: str, response_type: Type[TrackedModel], list_key: Optional[str] = None,
              **params) -> Request:
        return self._request(HttpMethod.GET, path, ResponseShape.LIST, response_type, params=params,
                             list_key=list_key)

    def _post(self, path: str, response_type: Type[TrackedModel], body: Optional[TrackedModel]) -> Request:
        return self._request(HttpMethod.POST, path, ResponseShape.SINGLE, response_type, body=body)

    def _post_list(self, path: str, response_type: Type[TrackedModel], body: TrackedModel) -> Request:
        return self._request(HttpMethod.POST, path, ResponseShape.LIST, response_type, body=body)

    def _post_without_result(self, path: str) -> Request[None]:
        return self._request(HttpMethod.POST, path, ResponseShape.NONE, None)

    def _request(self, method: HttpMethod, path: str, shape: ResponseShape,
                 response_type: Optional[Type[TrackedModel]], body: Optional[TrackedModel] = None,
                 params: Optional[dict] = None, list_key: Optional[str] = None) -> Request:
        logger.debug(f"Building {method.value} request for {path}")
        descriptor = RequestDescriptor(method=method, path=path, shape=shape, response_type=response_type,
                                       body=body.snapshot() if body is not None else None,
                                       params=params or {}, list_key=list_key)
        return Request(self.config, descriptor)


class Projects(_ResourceFactory):

    def get(self, project_id: int) -> Request[Project]:
        _require_positive(project_id, "project_id")
        return self._get(utils.format_path("get_project/{project_id}", project_id=project_id), Project)

    def list(self, *, is_completed: Optional[bool] = None) -> Request[List[Project]]:
        """Returns the list of available projects, optionally only the active or only the completed ones."""
        return self._list("get_projects", Project, list_key="projects", is_completed=is_completed)

    def add(self, project: Project) -> Request[Project]:
        _require_model(project, Project, "project")
        return self._post("add_project", Project, project)

    def update(self, project: Project) -> Request[Project]:
        """Updates an existing project. Only the fields set on the given model are changed."""
        _require_model(project, Project, "project")
        project_id = _require_id(project, "project")
        return self._post(utils.format_path("update_project/{project_id}", project_id=project_id), Project,
                          project)

    def delete(self, project: Project) -> Request[None]:
        _require_model(project, Project, "project")
        project_id = _require_id(project, "project")
        return self._post_without_result(utils.format_path("delete_project/{project_id}", project_id=project_id))


class Cases(_ResourceFactory):

    def get(self, case_id: int) -> Request[Case]:
        _require_positive(case_id, "case_id")
        return self._get(utils.format_path("get_case/{case_id}", case_id=case_id), Case)

    def list(self, project_id: int, suite_id: Optional[int] = None, *, section_id: Optional[int] = None,
             created_after: Optional[date] = None, created_before: Optional[date] = None,
             created_by: Optional[List[int]] = None, milestone_id: Optional[List[int]] = None,
             priority_id: Optional[List[int]] = None, type_id: Optional[List[int]] = None,
             updated_after: Optional[date] = None, updated_before: Optional[date] = None,
             updated_by: Optional[List[int]] = None) -> Request[List[Case]]:
        """
        Returns the test cases of a project.

        Args:
            project_id: The ID of the project.
            suite_id: The ID of the suite, only optional for projects in single suite mode.
            section_id: Only cases of this section.
            created_after: Only cases created after this date.
            created_before: Only cases created before this date.
            created_by: Only cases created by these users.
            milestone_id: Only cases with these milestones.
            priority_id: Only cases with these priorities.
            type_id: Only cases with these case types.
            updated_after: Only cases updated after this date.
            updated_before: Only cases updated before this date.
            updated_by: Only cases last updated by these users.
        """
        _require_positive(project_id, "project_id")
        if suite_id is not None:
            _require_positive(suite_id, "suite_id")
        if section_id is not None:
            _require_positive(section_id, "section_id")
        return self._list(utils.format_path("get_cases/{project_id}", project_id=project_id), Case,
                          list_key="cases", suite_id=suite_id, section_id=section_id, created_after=created_after,
                          created_before=created_before, created_by=created_by, milestone_id=milestone_id,
                          priority_id=priority_id, type_id=type_id, updated_after=updated_after,
                          updated_before=updated_before, updated_by=updated_by)

    def add(self, section_id: int, case: Case) -> Request[Case]:
        _require_positive(section_id, "section_id")
        _require_model(case, Case, "case")
        return self._post(utils.format_path("add_case/{section_id}", section_id=section_id), Case, case)

    def update(self, case: Case) -> Request[Case]:
        _require_model(case, Case, "case")
        case_id = _require_id(case, "case")
        return self._post(utils.format_path("update_case/{case_id}", case_id=case_id), Case, case)

    def delete(self, case: Case) -> Request[None]:
        _require_model(case, Case, "case")
        case_id = _require_id(case, "case")
        return self._post_without_result(utils.format_path("delete_case/{case_id}", case_id=case_id))


class CaseFields(_ResourceFactory):

    def list(self) -> Request[List[CaseField]]:
        return self._list("get_case_fields", CaseField)


class CaseTypes(_ResourceFactory):

    def list(self) -> Request[List[CaseType]]:
        return self._list("get_case_types", CaseType)


class Configurations(_ResourceFactory):

    def list(self, project_id: int) -> Request[List[ConfigurationGroup]]:
        """Returns the configurations of a project, grouped by configuration groups."""
        _require_positive(project_id, "project_id")
        return self._list(utils.format_path("get_configs/{project_id}", project_id=project_id), ConfigurationGroup)


class Sections(_ResourceFactory):

    def get(self, section_id: int) -> Request[Section]:
        _require_positive(section_id, "section_id")
        return self._get(utils.format_path("get_section/{section_id}", section_id=section_id), Section)

    def list(self, project_id: int, suite_id: Optional[int] = None) -> Request[List[Section]]:
        _require_positive(project_id, "project_id")
        if suite_id is not None:
            _require_positive(suite_id, "suite_id")
        return self._list(utils.format_path("get_sections/{project_id}", project_id=project_id), Section,
                          list_key="sections", suite_id=suite_id)

    def add(self, project_id: int, section: Section) -> Request[Section]:
        _require_positive(project_id, "project_id")
        _require_model(section, Section, "section")
        return self._post(utils.format_path("add_section/{project_id}", project_id=project_id), Section, section)

    def update(self, section: Section) -> Request[Section]:
        _require_model(section, Section, "section")
        section_id = _require_id(section, "section")
        return self._post(utils.format_path("update_section/{section_id}", section_id=section_id), Section,
                          section)

    def delete(self, section: Section) -> Request[None]:
        _require_model(section, Section, "section")
        section_id = _require_id(section, "section")
        return self._post_without_result(utils.format_path("delete_section/{section_id}", section_id=section_id))


class Suites(_ResourceFactory):

    def get(self, suite_id: int) -> Request[Suite]:
        _require_positive(suite_id, "suite_id")
        return self._get(utils.format_path("get_suite/{suite_id}", suite_id=suite_id), Suite)

    def list(self, project_id: int) -> Request[List[Suite]]:
        _require_positive(project_id, "project_id")
        return self._list(utils.format_path("get_suites/{project_id}", project_id=project_id), Suite)

    def add(self, project_id: int, suite: Suite) -> Request[Suite]:
        _require_positive(project_id, "project_id")
        _require_model(suite, Suite, "suite")
        return self._post(utils.format_path("add_suite/{project_id}", project_id=project_id), Suite, suite)

    def update(self, suite: Suite) -> Request[Suite]:
        _require_model(suite, Suite, "suite")
        suite_id = _require_id(suite, "suite")
        return self._post(utils.format_path("update_suite/{suite_id}", suite_id=suite_id), Suite, suite)

    def delete(self, suite: Suite) -> Request[None]:
        _require_model(suite, Suite, "suite")
        suite_id = _require_id(suite, "suite")
        return self._post_without_result(utils.format_path("delete_suite/{suite_id}", suite_id=suite_id))


class Milestones(_ResourceFactory):

    def get(self, milestone_id: int) -> Request[Milestone]:
        _require_positive(milestone_id, "milestone_id")
        return self._get(utils.format_path("get_milestone/{milestone_id}", milestone_id=milestone_id), Milestone)

    def list(self, project_id: int, *, is_completed: Optional[bool] = None,
             is_started: Optional[bool] = None) -> Request[List[Milestone]]:
        _require_positive(project_id, "project_id")
        return self._list(utils.format_path("get_milestones/{project_id}", project_id=project_id), Milestone,
                          list_key="milestones", is_completed=is_completed, is_started=is_started)

    def add(self, project_id: int, milestone: Milestone) -> Request[Milestone]:
        _require_positive(project_id, "project_id")
        _require_model(milestone, Milestone, "milestone")
        return self._post(utils.format_path("add_milestone/{project_id}", project_id=project_id), Milestone,
                          milestone)

    def update(self, milestone: Milestone) -> Request[Milestone]:
        _require_model(milestone, Milestone, "milestone")
        milestone_id = _require_id(milestone, "milestone")
        return self._post(utils.format_path("update_milestone/{milestone_id}", milestone_id=milestone_id),
                          Milestone, milestone)

    def delete(self, milestone: Milestone) -> Request[None]:
        _require_model(milestone, Milestone, "milestone")
        milestone_id = _require_id(milestone, "milestone")
        return self._post_without_result(
            utils.format_path("delete_milestone/{milestone_id}", milestone_id=milestone_id))


class Priorities(_ResourceFactory):

    def list(self) -> Request[List[Priority]]:
        return self._list("get_priorities", Priority)


class ResultFields(_ResourceFactory):

    def list(self) -> Request[List[ResultField]]:
        return self._list("get_result_fields", ResultField)


class Tests(_ResourceFactory):
    __test__ = False

    def get(self, test_id: int) -> Request[Test]:
        _require_positive(test_id, "test_id")
        return self._get(utils.format_path("get_test/{test_id}", test_id=test_id), Test)

    def list(self, run_id: int, *, status_id: Optional[List[int]] = None) -> Request[List[Test]]:
        """Returns the tests of a run, optionally only those with one of the given statuses."""
        _require_positive(run_id, "run_id")
        return self._list(utils.format_path("get_tests/{run_id}", run_id=run_id), Test, list_key="tests",
                          status_id=status_id)


class Users(_ResourceFactory):

    def get(self, user_id: int) -> Request[User]:
        _require_positive(user_id, "user_id")
        return self._get(utils.format_path("get_user/{user_id}", user_id=user_id), User)

    def get_by_email(self, email: str) -> Request[User]:
        if email is None:
            raise InvalidArgumentError("email cannot be None")
        email = email.strip()
        if not email:
            raise InvalidArgumentError("email cannot be empty")
        return self._get("get_user_by_email", User, email=email)

    def list(self) -> Request[List[User]]:
        return self._list("get_users", User, list_key="users")


class Statuses(_ResourceFactory):

    def list(self) -> Request[List[Status]]:
        return self._list("get_statuses", Status)


class Runs(_ResourceFactory):

    def get(self, run_id: int) -> Request[Run]:
        _require_positive(run_id, "run_id")
        return self._get(utils.format_path("get_run/{run_id}", run_id=run_id), Run)

    def list(self, project_id: int, *, created_after: Optional[date] = None, created_before: Optional[date] = None,
             created_by: Optional[List[int]] = None, is_completed: Optional[bool] = None,
             milestone_id: Optional[List[int]] = None, suite_id: Optional[List[int]] = None) -> Request[List[Run]]:
        """Returns the runs of a project which are not part of a test plan."""
        _require_positive(project_id, "project_id")
        return self._list(utils.format_path("get_runs/{project_id}", project_id=project_id), Run,
                          list_key="runs", created_after=created_after, created_before=created_before,
                          created_by=created_by, is_completed=is_completed, milestone_id=milestone_id,
                          suite_id=suite_id)

    def add(self, project_id: int, run: Run) -> Request[Run]:
        _require_positive(project_id, "project_id")
        _require_model(run, Run, "run")
        return self._post(utils.format_path("add_run/{project_id}", project_id=project_id), Run, run)

    def update(self, run: Run) -> Request[Run]:
        _require_model(run, Run, "run")
        run_id = _require_id(run, "run")
        return self._post(utils.format_path("update_run/{run_id}", run_id=run_id), Run, run)

    def close(self, run: Run) -> Request[Run]:
        """Closes a run and archives its tests and results."""
        _require_model(run, Run, "run")
        run_id = _require_id(run, "run")
        return self._post(utils.format_path("close_run/{run_id}", run_id=run_id), Run, None)

    def delete(self, run: Run) -> Request[None]:
        _require_model(run, Run, "run")
        run_id = _require_id(run, "run")
        return self._post_without_result(utils.format_path("delete_run/{run_id}", run_id=run_id))


class Plans(_ResourceFactory):

    def get(self, plan_id: int) -> Request[Plan]:
        _require_positive(plan_id, "plan_id")
        return self._get(utils.format_path("get_plan/{plan_id}", plan_id=plan_id), Plan)

    def list(self, project_id: int, *, created_after: Optional[date] = None, created_before: Optional[date] = None,
             created_by: Optional[List[int]] = None, is_completed: Optional[bool] = None,
             milestone_id: Optional[List[int]] = None) -> Request[List[Plan]]:
        _require_positive(project_id, "project_id")
        return self._list(utils.format_path("get_plans/{project_id}", project_id=project_id), Plan,
                          list_key="plans", created_after=created_after, created_before=created_before,
                          created_by=created_by, is_completed=is_completed, milestone_id=milestone_id)

    def add(self, project_id: int, plan: Plan) -> Request[Plan]:
        _require_positive(project_id, "project_id")
        _require_model(plan, Plan, "plan")
        return self._post(utils.format_path("add_plan/{project_id}", project_id=project_id), Plan, plan)

    def add_entry(self, plan_id: int, entry: PlanEntry) -> Request[PlanEntry]:
        """Adds one or more runs to a plan, one per configuration of the entry."""
        _require_positive(plan_id, "plan_id")
        _require_model(entry, PlanEntry, "entry")
        return self._post(utils.format_path("add_plan_entry/{plan_id}", plan_id=plan_id), PlanEntry, entry)

    def update(self, plan: Plan) -> Request[Plan]:
        _require_model(plan, Plan, "plan")
        plan_id = _require_id(plan, "plan")
        return self._post(utils.format_path("update_plan/{plan_id}", plan_id=plan_id), Plan, plan)

    def update_entry(self, plan_id: int, entry: PlanEntry) -> Request[PlanEntry]:
        _require_positive(plan_id, "plan_id")
        _require_model(entry, PlanEntry, "entry")
        entry_id = self._require_entry_id(entry.id)
        return self._post(utils.format_path("update_plan_entry/{plan_id}/{entry_id}", plan_id=plan_id,
                                            entry_id=entry_id), PlanEntry, entry)

    def close(self, plan: Plan) -> Request[Plan]:
        """Closes a plan and archives its runs and results."""
        _require_model(plan, Plan, "plan")
        plan_id = _require_id(plan, "plan")
        return self._post(utils.format_path("close_plan/{plan_id}", plan_id=plan_id), Plan, None)

    def delete(self, plan: Plan) -> Request[None]:
        _require_model(plan, Plan, "plan")
        plan_id = _require_id(plan, "plan")
        return self._post_without_result(utils.format_path("delete_plan/{plan_id}", plan_id=plan_id))

    def delete_entry(self, plan_id: int, entry_id: str) -> Request[None]:
        _require_positive(plan_id, "plan_id")
        entry_id = self._require_entry_id(entry_id)
        return self._post_without_result(utils.format_path("delete_plan_entry/{plan_id}/{entry_id}",
                                                           plan_id=plan_id, entry_id=entry_id))

    @staticmethod
    def _require_entry_id(entry_id: Optional[str]) -> str:
        if entry_id is None or not str(entry_id).strip():
            raise InvalidArgumentError("entry_id cannot be empty")
        return str(entry_id).strip()


class Results(_ResourceFactory):

    def list(self, test_id: int, *, status_id: Optional[List[int]] = None) -> Request[List[Result]]:
        _require_positive(test_id, "test_id")
        return self._list(utils.format_path("get_results/{test_id}", test_id=test_id), Result,
                          list_key="results", status_id=status_id)

    def list_for_run(self, run_id: int, *, created_after: Optional[date] = None,
                     created_before: Optional[date] = None, created_by: Optional[List[int]] = None,
                     status_id: Optional[List[int]] = None) -> Request[List[Result]]:
        _require_positive(run_id, "run_id")
        return self._list(utils.format_path("get_results_for_run/{run_id}", run_id=run_id), Result,
                          list_key="results", created_after=created_after, created_before=created_before,
                          created_by=created_by, status_id=status_id)

    def list_for_case(self, run_id: int, case_id: int, *,
                      status_id: Optional[List[int]] = None) -> Request[List[Result]]:
        _require_positive(run_id, "run_id")
        _require_positive(case_id, "case_id")
        return self._list(utils.format_path("get_results_for_case/{run_id}/{case_id}", run_id=run_id,
                                            case_id=case_id), Result, list_key="results", status_id=status_id)

    def add(self, test_id: int, result: Result) -> Request[Result]:
        _require_positive(test_id, "test_id")
        _require_model(result, Result, "result")
        return self._post(utils.format_path("add_result/{test_id}", test_id=test_id), Result, result)

    def add_for_case(self, run_id: int, case_id: int, result: Result) -> Request[Result]:
        _require_positive(run_id, "run_id")
        _require_positive(case_id, "case_id")
        _require_model(result, Result, "result")
        return self._post(utils.format_path("add_result_for_case/{run_id}/{case_id}", run_id=run_id,
                                            case_id=case_id), Result, result)

    def add_list(self, run_id: int, results: List[Result]) -> Request[List[Result]]:
        """
        Submits several results for tests of a run in one call. Every result needs its `test_id` set.
        """
        _require_positive(run_id, "run_id")
        self._require_results(results)
        return self._post_list(utils.format_path("add_results/{run_id}", run_id=run_id), Result,
                               ResultList(results=list(results)))

    def add_list_for_cases(self, run_id: int, results: List[Result]) -> Request[List[Result]]:
        """
        Submits several results for cases of a run in one call. Every result needs its `case_id` set.
        """
        _require_positive(run_id, "run_id")
        self._require_results(results)
        return self._post_list(utils.format_path("add_results_for_cases/{run_id}", run_id=run_id), Result,
                               ResultList(results=list(results)))

    @staticmethod
    def _require_results(results: List[Result]):
        if results is None:
            raise InvalidArgumentError("results cannot be None")
        if not results:
            raise InvalidArgumentError("results cannot be empty")
        for result in results:
            _require_model(result, Result, "result")


class TestRail:
    """
    A client for the TestRail API v2. Each accessor returns a factory of requests for one kind of resource.
    """
    __test__ = False

    def __init__(self, config: TestRailConfig):
        if config is None:
            raise InvalidArgumentError("config cannot be None")
        self.config = config
        logger.debug(f"TestRail Base URL: {config.base_url}")

    def projects(self) -> Projects:
        return Projects(self.config)

    def cases(self) -> Cases:
        return Cases(self.config)

    def case_fields(self) -> CaseFields:
        return CaseFields(self.config)

    def case_types(self) -> CaseTypes:
        return CaseTypes(self.config)

    def configurations(self) -> Configurations:
        return Configurations(self.config)

    def sections(self) -> Sections:
        return Sections(self.config)

    def suites(self) -> Suites:
        return Suites(self.config)

    def milestones(self) -> Milestones:
        return Milestones(self.config)

    def priorities(self) -> Priorities:
        return Priorities(self.config)

    def result_fields(self) -> ResultFields:
        return ResultFields(self.config)

    def tests(self) -> Tests:
        return Tests(self.config)

    def users(self) -> Users:
        return Users(self.config)

    def statuses(self) -> Statuses:
        return Statuses(self.config)

    def runs(self) -> Runs:
        return Runs(self.config)

    def plans(self) -> Plans:
        return Plans(self.config)

    def results(self) -> Results:
        return Results(self.config)
