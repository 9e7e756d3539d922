"""Provider scope tokens.

A scope request is a space-joined string of tokens.  Most areas come in a
read-write flavour (``accounting.contacts``) and a read-only flavour
(``accounting.contacts.read``); :class:`ScopeArea` models the area and
:class:`Permission` picks the flavour.

>>> str(Scope.of(ScopeArea.ACCOUNTING_CONTACTS.read_only(), OFFLINE_ACCESS))
'accounting.contacts.read offline_access'
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Iterable, Union

OFFLINE_ACCESS: Final[str] = "offline_access"
OPENID: Final[str] = "openid"
PROFILE: Final[str] = "profile"
EMAIL: Final[str] = "email"


class Permission(Enum):
    READ_ONLY = "read"
    READ_WRITE = "write"


class ScopeArea(str, Enum):
    """Scope areas that exist in both read-only and read-write form."""

    ACCOUNTING_TRANSACTIONS = "accounting.transactions"
    ACCOUNTING_SETTINGS = "accounting.settings"
    ACCOUNTING_CONTACTS = "accounting.contacts"
    ACCOUNTING_ATTACHMENTS = "accounting.attachments"
    ASSETS = "assets"
    FILES = "files"
    PAYROLL_EMPLOYEES = "payroll.employees"
    PAYROLL_PAYRUNS = "payroll.payruns"
    PAYROLL_PAYSLIP = "payroll.payslip"
    PAYROLL_SETTINGS = "payroll.settings"
    PAYROLL_TIMESHEETS = "payroll.timesheets"
    PROJECTS = "projects"

    def with_permission(self, permission: Permission) -> str:
        if permission is Permission.READ_ONLY:
            return f"{self.value}.read"
        return self.value

    def read_only(self) -> str:
        return self.with_permission(Permission.READ_ONLY)

    def read_write(self) -> str:
        return self.with_permission(Permission.READ_WRITE)


# Areas that only exist read-only.
ACCOUNTING_REPORTS_READ: Final[str] = "accounting.reports.read"
ACCOUNTING_REPORTS_1099_READ: Final[str] = "accounting.reports.tenninetynine.read"
ACCOUNTING_BUDGETS_READ: Final[str] = "accounting.budgets.read"
ACCOUNTING_JOURNALS_READ: Final[str] = "accounting.journals.read"

ScopeLike = Union[str, "Scope"]


@dataclass(frozen=True, slots=True)
class Scope:
    """Ordered, de-duplicated set of scope tokens."""

    tokens: tuple[str, ...] = ()

    @classmethod
    def of(cls, *items: ScopeLike) -> Scope:
        return cls(tuple(_flatten(items)))

    @classmethod
    def parse(cls, raw: str | None) -> Scope:
        """Build from a space or comma separated string (e.g. an env var)."""
        if not raw:
            return cls()
        return cls.of(*raw.replace(",", " ").split())

    def __or__(self, other: ScopeLike) -> Scope:
        return Scope.of(self, other)

    def __contains__(self, token: object) -> bool:
        return token in self.tokens

    def __bool__(self) -> bool:
        return bool(self.tokens)

    def __str__(self) -> str:
        return " ".join(self.tokens)

    # ----- presets -------------------------------------------------------- #
    @classmethod
    def all_accounting(cls) -> Scope:
        return cls.of(
            ScopeArea.ACCOUNTING_TRANSACTIONS.read_write(),
            ScopeArea.ACCOUNTING_SETTINGS.read_write(),
            ScopeArea.ACCOUNTING_CONTACTS.read_write(),
            ScopeArea.ACCOUNTING_ATTACHMENTS.read_write(),
            ACCOUNTING_REPORTS_READ,
            ACCOUNTING_JOURNALS_READ,
            ACCOUNTING_BUDGETS_READ,
        )

    @classmethod
    def common_accounting_read(cls) -> Scope:
        return cls.of(
            ScopeArea.ACCOUNTING_TRANSACTIONS.read_only(),
            ScopeArea.ACCOUNTING_CONTACTS.read_only(),
            ScopeArea.ACCOUNTING_SETTINGS.read_only(),
        )

    @classmethod
    def all_payroll(cls) -> Scope:
        return cls.of(
            ScopeArea.PAYROLL_EMPLOYEES.read_write(),
            ScopeArea.PAYROLL_PAYRUNS.read_write(),
            ScopeArea.PAYROLL_PAYSLIP.read_write(),
            ScopeArea.PAYROLL_SETTINGS.read_write(),
            ScopeArea.PAYROLL_TIMESHEETS.read_write(),
        )


def _flatten(items: Iterable[ScopeLike]) -> list[str]:
    seen: list[str] = []
    for item in items:
        if isinstance(item, Scope):
            tokens: Iterable[str] = item.tokens
        elif isinstance(item, Enum):
            tokens = (item.value,)
        else:
            tokens = item.split()
        for token in tokens:
            if token and token not in seen:
                seen.append(token)
    return seen


def scope_string(*items: ScopeLike) -> str:
    """Space-joined, de-duplicated scope string."""
    return str(Scope.of(*items))


ALL_ACCOUNTING: Final[Scope] = Scope.all_accounting()
COMMON_ACCOUNTING_READ: Final[Scope] = Scope.common_accounting_read()
ALL_PAYROLL: Final[Scope] = Scope.all_payroll()
