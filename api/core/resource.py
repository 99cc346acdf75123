"""
CRUD route generation for table-backed record types.

A `Resource` declares a table, its schemas and its owner column; `build_router`
turns it into list/fetch/create/update/delete endpoints. Every endpoint
requires a verified caller, and every mutation goes through the ownership
predicate in `auth.policy`.

No postponed annotations in this module: generated endpoints annotate their
parameters with the resource schema classes, which FastAPI must resolve as
real types.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from auth import policy
from auth.dependencies import get_current_caller
from auth.schemas import Caller

from .crud import DuplicateRecordError, ListQuery, TableRepository

logger = logging.getLogger(__name__)

DEFAULT_COUNT = 100
MAX_COUNT = 1000
NOT_FOUND = "Record not found."


@dataclass
class Resource:
    name: str
    table: str
    primary_key: str
    # Path parameter annotation, constraints included
    pk_type: Any
    columns: tuple[str, ...]
    read_schema: type[BaseModel]
    create_schema: type[BaseModel]
    update_schema: type[BaseModel]
    owner_column: str = "user_id"
    # column -> parser for `?attr=value` list filters
    filters: dict[str, Callable[[str], Any]] = field(default_factory=dict)
    search_columns: tuple[str, ...] = ()
    repository_factory: Callable[[], TableRepository] = field(init=False)

    def __post_init__(self) -> None:
        repository = TableRepository(
            table=self.table,
            primary_key=self.primary_key,
            columns=self.columns,
            search_columns=self.search_columns,
        )

        def get_repository() -> TableRepository:
            return repository

        self.repository_factory = get_repository

    @property
    def attributes(self) -> dict[str, str]:
        """camelCase attribute -> column."""
        return {to_camel(column): column for column in self.columns}


def parse_sort(raw: str, attributes: dict[str, str]) -> tuple[tuple[str, bool], ...]:
    """
    Parse `sort=stepsDate,-steps` into ((column, descending), ...).
    """
    order: list[tuple[str, bool]] = []
    for item in (raw or "").split(","):
        item = item.strip()
        if not item:
            continue
        descending = item.startswith("-")
        attribute = item.lstrip("+-")
        column = attributes.get(attribute)
        if column is None:
            raise HTTPException(status_code=400, detail=f"Sorting not allowed on: {attribute}.")
        order.append((column, descending))
    return tuple(order)


def parse_filters(resource: Resource, request: Request) -> dict[str, Any]:
    filters: dict[str, Any] = {}
    for column, parse in resource.filters.items():
        attribute = to_camel(column)
        raw = request.query_params.get(attribute)
        if raw is None:
            continue
        try:
            filters[column] = parse(raw)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid value for {attribute}.") from exc
    return filters


def content_range(offset: int, returned: int, total: int) -> str:
    if returned == 0:
        return f"items */{total}"
    return f"items {offset}-{offset + returned - 1}/{total}"


def build_router(resource: Resource) -> APIRouter:
    router = APIRouter(
        responses={
            401: {"description": "Missing or invalid bearer token"},
        },
    )

    collection_path = f"/{resource.name}"
    item_path = f"/{resource.name}/{{record_id}}"

    ReadSchema = resource.read_schema
    CreateSchema = resource.create_schema
    UpdateSchema = resource.update_schema
    PkType = resource.pk_type
    get_repository = resource.repository_factory

    async def _existing(repository: TableRepository, record_id: Any) -> dict:
        row = await repository.get_row(record_id)
        if row is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
        return row

    @router.get(collection_path, response_model=list[ReadSchema])
    async def list_records(
        request: Request,
        response: Response,
        offset: int = Query(0, ge=0),
        count: int = Query(DEFAULT_COUNT, ge=1, le=MAX_COUNT),
        sort: str = Query(""),
        q: str = Query("", max_length=200),
        _: Caller = Depends(get_current_caller),
        repository: TableRepository = Depends(get_repository),
    ):
        query = ListQuery(
            filters=parse_filters(resource, request),
            search=q,
            order_by=parse_sort(sort, resource.attributes),
            limit=count,
            offset=offset,
        )
        rows, total = await repository.list_rows(query)
        response.headers["Content-Range"] = content_range(offset, len(rows), total)
        return [ReadSchema.model_validate(row) for row in rows]

    @router.get(item_path, response_model=ReadSchema)
    async def get_record(
        record_id: PkType,
        _: Caller = Depends(get_current_caller),
        repository: TableRepository = Depends(get_repository),
    ):
        row = await _existing(repository, record_id)
        return ReadSchema.model_validate(row)

    @router.post(collection_path, response_model=ReadSchema, status_code=status.HTTP_201_CREATED)
    async def create_record(
        payload: CreateSchema,
        response: Response,
        caller: Caller = Depends(get_current_caller),
        repository: TableRepository = Depends(get_repository),
    ):
        values = payload.model_dump(exclude_unset=True)
        values = policy.claim_ownership(caller, values, owner_column=resource.owner_column)
        try:
            row = await repository.insert_row(values)
        except DuplicateRecordError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Record already exists.") from exc

        logger.info(
            "record_created resource=%s id=%s owner=%s",
            resource.name,
            row[resource.primary_key],
            caller.uid,
        )
        response.headers["Location"] = f"{collection_path}/{row[resource.primary_key]}"
        return ReadSchema.model_validate(row)

    async def update_record(
        record_id: PkType,
        payload: UpdateSchema,
        caller: Caller = Depends(get_current_caller),
        repository: TableRepository = Depends(get_repository),
    ):
        existing = await _existing(repository, record_id)
        policy.ensure_owner(caller, existing.get(resource.owner_column))

        changes = payload.model_dump(exclude_unset=True)
        if resource.owner_column in changes:
            policy.ensure_owner(caller, changes[resource.owner_column])

        try:
            row = await repository.update_row(record_id, changes)
        except DuplicateRecordError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Record already exists.") from exc
        if row is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
        logger.info("record_updated resource=%s id=%s owner=%s", resource.name, record_id, caller.uid)
        return ReadSchema.model_validate(row)

    router.add_api_route(item_path, update_record, methods=["PATCH"], response_model=ReadSchema)
    router.add_api_route(item_path, update_record, methods=["PUT"], response_model=ReadSchema)

    @router.delete(item_path)
    async def delete_record(
        record_id: PkType,
        caller: Caller = Depends(get_current_caller),
        repository: TableRepository = Depends(get_repository),
    ) -> dict:
        existing = await _existing(repository, record_id)
        policy.ensure_owner(caller, existing.get(resource.owner_column))

        if not await repository.delete_row(record_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND)
        logger.info("record_deleted resource=%s id=%s owner=%s", resource.name, record_id, caller.uid)
        return {}

    return router
