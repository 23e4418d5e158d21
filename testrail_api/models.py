# SPDX-FileCopyrightText: 2025 Taras Paruta (partarstu@gmail.com)
#
# SPDX-License-Identifier: Apache-2.0

from datetime import datetime
from enum import IntEnum
from typing import Annotated, Any, Dict, FrozenSet, List, Optional, Set, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, PrivateAttr
from pydantic_core import to_jsonable_python

from testrail_api.codec import to_unix_timestamp

M = TypeVar("M", bound="TrackedModel")

Timestamp = Annotated[
    datetime,
    PlainSerializer(lambda value: int(to_unix_timestamp(value)), return_type=int, when_used="json"),
]

CUSTOM_FIELD_PREFIX = "custom_"


class TrackedModel(BaseModel):
    """
    A TestRail resource which remembers the fields explicitly assigned by the caller.

    Keyword arguments given to the constructor and every later assignment mark the field as dirty.
    Models decoded from a response (see `hydrate`) start with no dirty fields. Only dirty fields are
    sent by `to_payload`, which keeps partial updates partial: untouched fields are omitted, fields
    explicitly set to None are sent as null.
    """
    model_config = ConfigDict(extra="allow", validate_assignment=True)

    _dirty: Set[str] = PrivateAttr(default_factory=set)

    def __init__(self, **data: Any):
        super().__init__(**data)
        self._dirty = set(self.model_fields_set) | set(self.model_extra or {})

    def __setattr__(self, name: str, value: Any):
        if name.startswith("_"):
            super().__setattr__(name, value)
            return
        if name not in type(self).model_fields and not name.startswith(CUSTOM_FIELD_PREFIX):
            raise AttributeError(f"{type(self).__name__} has no field '{name}'")
        super().__setattr__(name, value)
        self._dirty.add(name)

    @classmethod
    def hydrate(cls: type[M], payload: Dict[str, Any]) -> M:
        """
        Builds a model from a decoded TestRail response. No field is considered dirty, neither on the model
        itself nor on the models nested in it (plan entries, their runs, sub-milestones etc.).
        """
        model = cls.model_validate(payload)
        model._clear_dirty()
        return model

    def assign(self: M, **values: Any) -> M:
        """Assigns several fields at once and returns the same instance."""
        for name, value in values.items():
            setattr(self, name, value)
        return self

    def is_dirty(self, name: str) -> bool:
        return name in self._dirty

    @property
    def dirty_fields(self) -> FrozenSet[str]:
        return frozenset(self._dirty)

    def reset(self: M) -> M:
        self._clear_dirty()
        return self

    def clone(self: M) -> M:
        """Returns a deep copy with no dirty fields, ready to be reused as a template."""
        copied = self.model_copy(deep=True)
        copied._clear_dirty()
        return copied

    def snapshot(self: M) -> M:
        """Returns a deep copy which keeps the dirty fields, so later changes of this model don't leak into it."""
        copied = self.model_copy(deep=True)
        copied._dirty = set(self._dirty)
        return copied

    def _clear_dirty(self):
        self._dirty = set()
        for name in type(self).model_fields:
            for nested in _nested_models(getattr(self, name)):
                nested._clear_dirty()

    def to_payload(self) -> Dict[str, Any]:
        """Serializes the dirty fields for a write request."""
        payload = {}
        model_fields = type(self).model_fields
        for name, field_info in model_fields.items():
            if name in self._dirty:
                key = field_info.alias or name
                payload[key] = self._dump_value(name, getattr(self, name))
        for name, value in (self.model_extra or {}).items():
            if name in self._dirty:
                payload[name] = self._dump_value(None, value)
        return payload

    def _dump_value(self, name: Optional[str], value: Any) -> Any:
        if isinstance(value, TrackedModel):
            return value.to_payload()
        if isinstance(value, (list, tuple)) and any(isinstance(item, TrackedModel) for item in value):
            return [item.to_payload() if isinstance(item, TrackedModel) else to_jsonable_python(item)
                    for item in value]
        if name is None:
            return to_jsonable_python(value)
        dumped = self.model_dump(mode="json", by_alias=True, include={name})
        return next(iter(dumped.values()))


def _nested_models(value: Any):
    if isinstance(value, TrackedModel):
        yield value
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _nested_models(item)


class SuiteMode(IntEnum):
    SINGLE = 1
    SINGLE_WITH_BASELINES = 2
    MULTIPLE = 3


class ResultStatus(IntEnum):
    PASSED = 1
    BLOCKED = 2
    UNTESTED = 3
    RETEST = 4
    FAILED = 5


class Project(TrackedModel):
    id: Optional[int] = None
    name: Optional[str] = None
    announcement: Optional[str] = None
    show_announcement: Optional[bool] = None
    is_completed: Optional[bool] = None
    completed_on: Optional[Timestamp] = None
    suite_mode: Optional[SuiteMode] = None
    url: Optional[str] = None


class Case(TrackedModel):
    id: Optional[int] = None
    title: Optional[str] = None
    section_id: Optional[int] = None
    suite_id: Optional[int] = None
    template_id: Optional[int] = None
    type_id: Optional[int] = None
    priority_id: Optional[int] = None
    milestone_id: Optional[int] = None
    refs: Optional[str] = Field(default=None, description="Comma-separated list of references/requirements")
    estimate: Optional[str] = Field(default=None, description="Timespan, e.g. '30s' or '1m 45s'")
    estimate_forecast: Optional[str] = None
    created_by: Optional[int] = None
    created_on: Optional[Timestamp] = None
    updated_by: Optional[int] = None
    updated_on: Optional[Timestamp] = None


class CustomField(TrackedModel):
    id: Optional[int] = None
    type_id: Optional[int] = None
    name: Optional[str] = None
    system_name: Optional[str] = None
    label: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
    include_all: Optional[bool] = None
    display_order: Optional[int] = None
    template_ids: Optional[List[int]] = None
    configs: Optional[List[Dict[str, Any]]] = None


class CaseField(CustomField):
    pass


class ResultField(CustomField):
    pass


class CaseType(TrackedModel):
    id: Optional[int] = None
    name: Optional[str] = None
    is_default: Optional[bool] = None


class Configuration(TrackedModel):
    id: Optional[int] = None
    name: Optional[str] = None
    group_id: Optional[int] = None


class ConfigurationGroup(TrackedModel):
    id: Optional[int] = None
    name: Optional[str] = None
    project_id: Optional[int] = None
    configs: Optional[List[Configuration]] = None


class Section(TrackedModel):
    id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    suite_id: Optional[int] = None
    parent_id: Optional[int] = None
    display_order: Optional[int] = None
    depth: Optional[int] = None


class Suite(TrackedModel):
    id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    project_id: Optional[int] = None
    is_baseline: Optional[bool] = None
    is_master: Optional[bool] = None
    is_completed: Optional[bool] = None
    completed_on: Optional[Timestamp] = None
    url: Optional[str] = None


class Milestone(TrackedModel):
    id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    project_id: Optional[int] = None
    parent_id: Optional[int] = None
    refs: Optional[str] = None
    due_on: Optional[Timestamp] = None
    start_on: Optional[Timestamp] = None
    started_on: Optional[Timestamp] = None
    is_started: Optional[bool] = None
    is_completed: Optional[bool] = None
    completed_on: Optional[Timestamp] = None
    milestones: Optional[List["Milestone"]] = Field(default=None, description="Sub-milestones")
    url: Optional[str] = None


class Priority(TrackedModel):
    id: Optional[int] = None
    name: Optional[str] = None
    short_name: Optional[str] = None
    priority: Optional[int] = None
    is_default: Optional[bool] = None


class Test(TrackedModel):
    __test__ = False

    id: Optional[int] = None
    case_id: Optional[int] = None
    run_id: Optional[int] = None
    status_id: Optional[int] = None
    title: Optional[str] = None
    assignedto_id: Optional[int] = None
    template_id: Optional[int] = None
    type_id: Optional[int] = None
    priority_id: Optional[int] = None
    milestone_id: Optional[int] = None
    refs: Optional[str] = None
    estimate: Optional[str] = None
    estimate_forecast: Optional[str] = None


class User(TrackedModel):
    id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None
    is_active: Optional[bool] = None


class Status(TrackedModel):
    id: Optional[int] = None
    name: Optional[str] = None
    label: Optional[str] = None
    color_dark: Optional[int] = None
    color_medium: Optional[int] = None
    color_bright: Optional[int] = None
    is_system: Optional[bool] = None
    is_untested: Optional[bool] = None
    is_final: Optional[bool] = None


class Run(TrackedModel):
    id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    project_id: Optional[int] = None
    suite_id: Optional[int] = None
    milestone_id: Optional[int] = None
    plan_id: Optional[int] = None
    assignedto_id: Optional[int] = None
    include_all: Optional[bool] = None
    case_ids: Optional[List[int]] = None
    config_ids: Optional[List[int]] = None
    config: Optional[str] = None
    refs: Optional[str] = None
    is_completed: Optional[bool] = None
    completed_on: Optional[Timestamp] = None
    created_by: Optional[int] = None
    created_on: Optional[Timestamp] = None
    passed_count: Optional[int] = None
    blocked_count: Optional[int] = None
    untested_count: Optional[int] = None
    retest_count: Optional[int] = None
    failed_count: Optional[int] = None
    entry_id: Optional[str] = None
    entry_index: Optional[int] = None
    url: Optional[str] = None


class PlanEntry(TrackedModel):
    id: Optional[str] = Field(default=None, description="Entry IDs are UUID strings, not integers")
    suite_id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    assignedto_id: Optional[int] = None
    include_all: Optional[bool] = None
    case_ids: Optional[List[int]] = None
    config_ids: Optional[List[int]] = None
    refs: Optional[str] = None
    runs: Optional[List[Run]] = None


class Plan(TrackedModel):
    id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    project_id: Optional[int] = None
    milestone_id: Optional[int] = None
    assignedto_id: Optional[int] = None
    refs: Optional[str] = None
    is_completed: Optional[bool] = None
    completed_on: Optional[Timestamp] = None
    created_by: Optional[int] = None
    created_on: Optional[Timestamp] = None
    passed_count: Optional[int] = None
    blocked_count: Optional[int] = None
    untested_count: Optional[int] = None
    retest_count: Optional[int] = None
    failed_count: Optional[int] = None
    entries: Optional[List[PlanEntry]] = None
    url: Optional[str] = None


class Result(TrackedModel):
    id: Optional[int] = None
    test_id: Optional[int] = None
    case_id: Optional[int] = Field(default=None, description="Only used when results are submitted per case")
    status_id: Optional[int] = None
    comment: Optional[str] = None
    version: Optional[str] = None
    elapsed: Optional[str] = Field(default=None, description="Timespan, e.g. '30s' or '1m 45s'")
    defects: Optional[str] = Field(default=None, description="Comma-separated list of defect IDs")
    assignedto_id: Optional[int] = None
    created_by: Optional[int] = None
    created_on: Optional[Timestamp] = None


class ResultList(TrackedModel):
    """Body of a bulk result submission. Never returned or stored by TestRail."""
    results: List[Result] = Field(default_factory=list)
