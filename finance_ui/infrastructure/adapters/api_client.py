"""
HTTP client for the Finance Manager backend.

Wraps an ``httpx.AsyncClient`` and exposes one coroutine per endpoint the
view models use. Every call resets ``last_error``/``last_error_code``; a
failed response fills them from the body and raises ``ApiError`` (chained
from ``httpx.HTTPStatusError``):

- JSON object with "message" → last_error, "error" → last_error_code
- JSON object with an "errors" object (RFC 7807 validation problems) →
  last_error = "field: msg; field: msg"
- non-JSON body → last_error = raw text
- nothing usable → reason phrase or "HTTP {status}"
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, BinaryIO, Dict, List, Optional, Type, TypeVar
from uuid import UUID

import httpx
from pydantic import BaseModel

from ...domain.exceptions import ApiError
from ...domain.models import (
    AccountCreateRequest,
    AccountDto,
    AccountUpdateRequest,
    AttachmentDto,
    AttachmentEntityKind,
    AttachmentRole,
    BackupDto,
    BackupRestoreStatusDto,
    CategoryDto,
    ContactCreateRequest,
    ContactDto,
    ContactType,
    ContactUpdateRequest,
    CreateUserRequest,
    PostingDto,
    SavingsPlanCreateRequest,
    SavingsPlanDto,
    SecurityDto,
    SecurityRequest,
    UpdateUserRequest,
    UserAdminDto,
    display_name,
)
from ...utils.logging_setup import get_logger
from ...utils.perf_logger import log_timing_async

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _posting_params(skip: int, take: int, q: Optional[str], date_from: Optional[datetime],
                    date_to: Optional[datetime]) -> Dict[str, Any]:
    params: Dict[str, Any] = {"skip": skip, "take": take}
    if q and q.strip():
        params["q"] = q
    if date_from is not None:
        params["from"] = date_from.isoformat()
    if date_to is not None:
        params["to"] = date_to.isoformat()
    return params


class ApiClient:
    """
    Finance Manager API client.

    Usage:
        async with ApiClient("https://finance.example", token=jwt) as api:
            accounts = await api.list_accounts(take=50)
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        self.last_error: Optional[str] = None
        self.last_error_code: Optional[str] = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # plumbing
    # ------------------------------------------------------------------

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        self.last_error = None
        self.last_error_code = None
        async with log_timing_async(f"{method} {url}") as ctx:
            resp = await self._http.request(method, url, **kwargs)
            ctx["status"] = resp.status_code
        return resp

    async def _call(self, method: str, url: str, not_found_as_none: bool = False,
                    **kwargs: Any) -> Optional[httpx.Response]:
        resp = await self._send(method, url, **kwargs)
        if not_found_as_none and resp.status_code == httpx.codes.NOT_FOUND:
            logger.debug(f"{method} {url} -> 404")
            return None
        self._ensure_success_or_set_error(resp)
        return resp

    def _ensure_success_or_set_error(self, resp: httpx.Response) -> None:
        if resp.is_success:
            return

        content = resp.text
        if content and content.strip():
            try:
                body = json.loads(content)
            except ValueError:
                self.last_error = content
            else:
                if isinstance(body, dict):
                    if isinstance(body.get("message"), str):
                        self.last_error = body["message"]
                    if isinstance(body.get("error"), str):
                        self.last_error_code = body["error"]
                    if isinstance(body.get("errors"), dict):
                        self._set_validation_errors(body["errors"])

        if not self.last_error or not self.last_error.strip():
            self.last_error = resp.reason_phrase or f"HTTP {resp.status_code}"

        logger.warning(
            f"{resp.request.method} {resp.request.url.path} failed: {resp.status_code} "
            f"code={self.last_error_code} error={self.last_error}"
        )
        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ApiError(self.last_error, self.last_error_code, resp.status_code) from e

    def _set_validation_errors(self, errors: Dict[str, Any]) -> None:
        messages: List[str] = []
        for name, value in errors.items():
            if isinstance(value, list):
                messages.extend(f"{name}: {item}" for item in value if isinstance(item, str))
            elif isinstance(value, str):
                messages.append(f"{name}: {value}")
        if messages:
            self.last_error = "; ".join(messages)

    @staticmethod
    def _one(model: Type[M], resp: Optional[httpx.Response]) -> Optional[M]:
        if resp is None or not resp.content:
            return None
        return model.model_validate(resp.json())

    @staticmethod
    def _many(model: Type[M], resp: Optional[httpx.Response]) -> List[M]:
        if resp is None or not resp.content:
            return []
        return [model.model_validate(item) for item in resp.json() or []]

    async def _get_one(self, model: Type[M], url: str) -> Optional[M]:
        return self._one(model, await self._call("GET", url, not_found_as_none=True))

    async def _delete(self, url: str) -> bool:
        return await self._call("DELETE", url, not_found_as_none=True) is not None

    async def _post_flag(self, url: str) -> bool:
        return await self._call("POST", url, not_found_as_none=True) is not None

    # ------------------------------------------------------------------
    # accounts
    # ------------------------------------------------------------------

    async def list_accounts(self, skip: int = 0, take: int = 100,
                            bank_contact_id: Optional[UUID] = None) -> List[AccountDto]:
        params: Dict[str, Any] = {"skip": skip, "take": take}
        if bank_contact_id is not None:
            params["bankContactId"] = str(bank_contact_id)
        return self._many(AccountDto, await self._call("GET", "/api/accounts", params=params))

    async def get_account(self, account_id: UUID) -> Optional[AccountDto]:
        return await self._get_one(AccountDto, f"/api/accounts/{account_id}")

    async def create_account(self, request: AccountCreateRequest) -> AccountDto:
        resp = await self._call("POST", "/api/accounts", json=request.to_wire())
        return AccountDto.model_validate(resp.json())

    async def update_account(self, account_id: UUID, request: AccountUpdateRequest) -> Optional[AccountDto]:
        resp = await self._call("PUT", f"/api/accounts/{account_id}", not_found_as_none=True,
                                json=request.to_wire())
        return self._one(AccountDto, resp)

    async def delete_account(self, account_id: UUID) -> bool:
        return await self._delete(f"/api/accounts/{account_id}")

    async def set_account_symbol(self, account_id: UUID, attachment_id: UUID) -> None:
        await self._call("POST", f"/api/accounts/{account_id}/symbol/{attachment_id}")

    # ------------------------------------------------------------------
    # contacts
    # ------------------------------------------------------------------

    async def list_contacts(self, skip: int = 0, take: int = 50, type: Optional[ContactType] = None,
                            all: bool = False, name_filter: Optional[str] = None) -> List[ContactDto]:
        params: Dict[str, Any] = {"skip": skip, "take": take}
        if type is not None:
            params["type"] = display_name(type)
        if all:
            params["all"] = "true"
        if name_filter and name_filter.strip():
            params["q"] = name_filter
        return self._many(ContactDto, await self._call("GET", "/api/contacts", params=params))

    async def get_contact(self, contact_id: UUID) -> Optional[ContactDto]:
        return await self._get_one(ContactDto, f"/api/contacts/{contact_id}")

    async def create_contact(self, request: ContactCreateRequest) -> ContactDto:
        resp = await self._call("POST", "/api/contacts", json=request.to_wire())
        return ContactDto.model_validate(resp.json())

    async def update_contact(self, contact_id: UUID, request: ContactUpdateRequest) -> Optional[ContactDto]:
        resp = await self._call("PUT", f"/api/contacts/{contact_id}", not_found_as_none=True,
                                json=request.to_wire())
        return self._one(ContactDto, resp)

    async def delete_contact(self, contact_id: UUID) -> bool:
        return await self._delete(f"/api/contacts/{contact_id}")

    async def set_contact_symbol(self, contact_id: UUID, attachment_id: UUID) -> None:
        await self._call("POST", f"/api/contacts/{contact_id}/symbol/{attachment_id}")

    async def list_contact_categories(self) -> List[CategoryDto]:
        return self._many(CategoryDto, await self._call("GET", "/api/contact-categories"))

    # ------------------------------------------------------------------
    # savings plans
    # ------------------------------------------------------------------

    async def list_savings_plans(self, only_active: bool = True) -> List[SavingsPlanDto]:
        resp = await self._call("GET", "/api/savings-plans", params={"onlyActive": _bool(only_active)})
        return self._many(SavingsPlanDto, resp)

    async def get_savings_plan(self, plan_id: UUID) -> Optional[SavingsPlanDto]:
        return await self._get_one(SavingsPlanDto, f"/api/savings-plans/{plan_id}")

    async def create_savings_plan(self, request: SavingsPlanCreateRequest) -> SavingsPlanDto:
        resp = await self._call("POST", "/api/savings-plans", json=request.to_wire())
        return SavingsPlanDto.model_validate(resp.json())

    async def update_savings_plan(self, plan_id: UUID, request: SavingsPlanCreateRequest) -> Optional[SavingsPlanDto]:
        resp = await self._call("PUT", f"/api/savings-plans/{plan_id}", not_found_as_none=True,
                                json=request.to_wire())
        return self._one(SavingsPlanDto, resp)

    async def archive_savings_plan(self, plan_id: UUID) -> bool:
        return await self._post_flag(f"/api/savings-plans/{plan_id}/archive")

    async def delete_savings_plan(self, plan_id: UUID) -> bool:
        return await self._delete(f"/api/savings-plans/{plan_id}")

    async def set_savings_plan_symbol(self, plan_id: UUID, attachment_id: UUID) -> None:
        await self._call("POST", f"/api/savings-plans/{plan_id}/symbol/{attachment_id}")

    async def list_savings_plan_categories(self) -> List[CategoryDto]:
        return self._many(CategoryDto, await self._call("GET", "/api/savings-plan-categories"))

    # ------------------------------------------------------------------
    # securities
    # ------------------------------------------------------------------

    async def list_securities(self, only_active: bool = True) -> List[SecurityDto]:
        resp = await self._call("GET", "/api/securities", params={"onlyActive": _bool(only_active)})
        return self._many(SecurityDto, resp)

    async def get_security(self, security_id: UUID) -> Optional[SecurityDto]:
        return await self._get_one(SecurityDto, f"/api/securities/{security_id}")

    async def create_security(self, request: SecurityRequest) -> SecurityDto:
        resp = await self._call("POST", "/api/securities", json=request.to_wire())
        return SecurityDto.model_validate(resp.json())

    async def update_security(self, security_id: UUID, request: SecurityRequest) -> Optional[SecurityDto]:
        resp = await self._call("PUT", f"/api/securities/{security_id}", not_found_as_none=True,
                                json=request.to_wire())
        return self._one(SecurityDto, resp)

    async def archive_security(self, security_id: UUID) -> bool:
        return await self._post_flag(f"/api/securities/{security_id}/archive")

    async def delete_security(self, security_id: UUID) -> bool:
        return await self._delete(f"/api/securities/{security_id}")

    async def set_security_symbol(self, security_id: UUID, attachment_id: UUID) -> None:
        await self._call("POST", f"/api/securities/{security_id}/symbol/{attachment_id}")

    async def list_security_categories(self) -> List[CategoryDto]:
        return self._many(CategoryDto, await self._call("GET", "/api/security-categories"))

    # ------------------------------------------------------------------
    # postings
    # ------------------------------------------------------------------

    async def _list_postings(self, url: str, params: Dict[str, Any]) -> List[PostingDto]:
        return self._many(PostingDto, await self._call("GET", url, not_found_as_none=True, params=params))

    async def list_account_postings(self, account_id: UUID, skip: int = 0, take: int = 50,
                                    q: Optional[str] = None, date_from: Optional[datetime] = None,
                                    date_to: Optional[datetime] = None) -> List[PostingDto]:
        return await self._list_postings(f"/api/postings/account/{account_id}",
                                         _posting_params(skip, take, q, date_from, date_to))

    async def list_contact_postings(self, contact_id: UUID, skip: int = 0, take: int = 50,
                                    q: Optional[str] = None, date_from: Optional[datetime] = None,
                                    date_to: Optional[datetime] = None) -> List[PostingDto]:
        return await self._list_postings(f"/api/postings/contact/{contact_id}",
                                         _posting_params(skip, take, q, date_from, date_to))

    async def list_savings_plan_postings(self, plan_id: UUID, skip: int = 0, take: int = 50,
                                         q: Optional[str] = None, date_from: Optional[datetime] = None,
                                         date_to: Optional[datetime] = None) -> List[PostingDto]:
        return await self._list_postings(f"/api/postings/savings-plan/{plan_id}",
                                         _posting_params(skip, take, q, date_from, date_to))

    async def list_security_postings(self, security_id: UUID, skip: int = 0, take: int = 50,
                                     date_from: Optional[datetime] = None,
                                     date_to: Optional[datetime] = None) -> List[PostingDto]:
        return await self._list_postings(f"/api/postings/security/{security_id}",
                                         _posting_params(skip, take, None, date_from, date_to))

    # ------------------------------------------------------------------
    # attachments
    # ------------------------------------------------------------------

    async def upload_attachment(self, entity_kind: AttachmentEntityKind, entity_id: UUID,
                                stream: BinaryIO, file_name: str, content_type: str,
                                role: Optional[AttachmentRole] = None) -> AttachmentDto:
        params: Dict[str, Any] = {}
        if role is not None:
            params["role"] = int(role)
        files = {"file": (file_name, stream, content_type or DEFAULT_CONTENT_TYPE)}
        resp = await self._call("POST", f"/api/attachments/{int(entity_kind)}/{entity_id}",
                                params=params, files=files)
        return AttachmentDto.model_validate(resp.json())

    # ------------------------------------------------------------------
    # admin: users
    # ------------------------------------------------------------------

    async def list_users(self) -> List[UserAdminDto]:
        return self._many(UserAdminDto, await self._call("GET", "/api/admin/users"))

    async def get_user(self, user_id: UUID) -> Optional[UserAdminDto]:
        return await self._get_one(UserAdminDto, f"/api/admin/users/{user_id}")

    async def create_user(self, request: CreateUserRequest) -> UserAdminDto:
        resp = await self._call("POST", "/api/admin/users", json=request.to_wire())
        return UserAdminDto.model_validate(resp.json())

    async def update_user(self, user_id: UUID, request: UpdateUserRequest) -> Optional[UserAdminDto]:
        resp = await self._call("PUT", f"/api/admin/users/{user_id}", not_found_as_none=True,
                                json=request.to_wire())
        return self._one(UserAdminDto, resp)

    async def delete_user(self, user_id: UUID) -> bool:
        return await self._delete(f"/api/admin/users/{user_id}")

    async def unlock_user(self, user_id: UUID) -> bool:
        return await self._post_flag(f"/api/admin/users/{user_id}/unlock")

    # ------------------------------------------------------------------
    # setup: backups and maintenance
    # ------------------------------------------------------------------

    async def list_backups(self) -> List[BackupDto]:
        return self._many(BackupDto, await self._call("GET", "/api/setup/backups"))

    async def create_backup(self) -> BackupDto:
        resp = await self._call("POST", "/api/setup/backups")
        return BackupDto.model_validate(resp.json())

    async def upload_backup(self, stream: BinaryIO, file_name: str) -> BackupDto:
        files = {"file": (file_name, stream, DEFAULT_CONTENT_TYPE)}
        resp = await self._call("POST", "/api/setup/backups/upload", files=files)
        return BackupDto.model_validate(resp.json())

    async def start_apply_backup(self, backup_id: UUID) -> BackupRestoreStatusDto:
        resp = await self._call("POST", f"/api/setup/backups/{backup_id}/apply/start")
        return BackupRestoreStatusDto.model_validate(resp.json())

    async def delete_backup(self, backup_id: UUID) -> bool:
        return await self._delete(f"/api/setup/backups/{backup_id}")

    async def rebuild_aggregates(self, allow_duplicate: bool = False) -> None:
        await self._call("POST", "/api/background-tasks/aggregates/rebuild",
                         params={"allowDuplicate": _bool(allow_duplicate)})
