# This project was developed with assistance from AI tools.
"""In-memory Salesforce stand-in for local dev, staging, and tests.

Activated via ``MOCK_SALESFORCE=true``. Serves fixture contacts, tasks,
field history, and picklists through the same interface as
``SalesforceClient``, and evaluates the SOQL subset this service emits:
``SELECT <fields>|COUNT() FROM <object> [WHERE ...] [ORDER BY f ASC|DESC]
[LIMIT n] [OFFSET n]`` with ``AND``/``OR``/parentheses, ``=``, ``!=``,
``<``, ``<=``, ``>``, ``>=``, ``LIKE`` and ``IN``.
"""

import copy
import logging
import re
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from ...core.errors import CRMError

logger = logging.getLogger(__name__)

Record = dict[str, Any]
Predicate = Callable[[Record], bool]

# -- Fixtures --

FAKE_CONTACTS: list[Record] = [
    {
        "Id": "003MOCK000000001", "Name": "John Smith", "FirstName": "John", "LastName": "Smith",
        "Email": "john.smith@example.com", "Phone": "(555) 111-0001", "MobilePhone": "(555) 222-0001",
        "OwnerId": "005MOCK01", "Owner": {"Name": "Leon Belov"}, "CreatedDate": "2025-11-15T10:00:00.000Z",
        "LastModifiedDate": "2026-02-10T14:30:00.000Z", "LeadSource": "Zillow",
        "Status__c": "Active", "Temparture__c": "Hot", "No_of_Calls__c": "3",
        "Message_QuickUpdate__c": "Very interested in refinancing", "Hot_Lead__c": True, "PAAL__c": False,
        "In_Process__c": False, "Is_Client__c": False, "MtgPlanner_CRM__Stage__c": "Application",
        "MtgPlanner_CRM__Thank_you_to_Referral_Source__c": False,
        "BDR__c": None, "Leon_BDR__c": None, "Marat_BDR__c": None,
        "Loan_Partners__c": "Test LO", "Leon_Loan_Partner__c": "Test LO", "Marat__c": None,
        "MtgPlanner_CRM__Referred_By_Text__c": "Test Agent",
        "MtgPlanner_CRM__Last_Touch__c": "Called on 2/10, left voicemail",
        "Last_Touch_via_360_SMS__c": "Sent follow-up SMS 2/11",
        "Description": "Looking to refinance primary residence. Currently at 6.5% rate.",
        "RecordTypeId": "012MOCK01",
    },
    {
        "Id": "003MOCK000000002", "Name": "Jane Doe", "FirstName": "Jane", "LastName": "Doe",
        "Email": "jane.doe@example.com", "Phone": "(555) 111-0002", "MobilePhone": None,
        "OwnerId": "005MOCK01", "Owner": {"Name": "Leon Belov"}, "CreatedDate": "2025-12-01T08:00:00.000Z",
        "LastModifiedDate": "2026-02-08T16:00:00.000Z", "LeadSource": "Referral",
        "Status__c": "Follow Up", "Temparture__c": "Warm", "No_of_Calls__c": "1",
        "Message_QuickUpdate__c": None, "Hot_Lead__c": False, "PAAL__c": False,
        "In_Process__c": False, "Is_Client__c": False, "MtgPlanner_CRM__Stage__c": "Prospect",
        "MtgPlanner_CRM__Thank_you_to_Referral_Source__c": True,
        "BDR__c": None, "Leon_BDR__c": None, "Marat_BDR__c": None,
        "Loan_Partners__c": "Test LO", "Leon_Loan_Partner__c": None, "Marat__c": None,
        "MtgPlanner_CRM__Referred_By_Text__c": "Test Agent",
        "MtgPlanner_CRM__Last_Touch__c": None, "Last_Touch_via_360_SMS__c": None,
        "Description": "First-time home buyer, pre-approved.",
        "RecordTypeId": "012MOCK01",
    },
    {
        "Id": "003MOCK000000003", "Name": "Robert Johnson", "FirstName": "Robert", "LastName": "Johnson",
        "Email": "robert.j@example.com", "Phone": "(555) 111-0003", "MobilePhone": "(555) 222-0003",
        "OwnerId": "005MOCK01", "Owner": {"Name": "Leon Belov"}, "CreatedDate": "2026-01-10T12:00:00.000Z",
        "LastModifiedDate": "2026-02-15T09:00:00.000Z", "LeadSource": "Website",
        "Status__c": "New", "Temparture__c": "Cold", "No_of_Calls__c": "0",
        "Message_QuickUpdate__c": None, "Hot_Lead__c": False, "PAAL__c": False,
        "In_Process__c": False, "Is_Client__c": False, "MtgPlanner_CRM__Stage__c": None,
        "MtgPlanner_CRM__Thank_you_to_Referral_Source__c": False,
        "BDR__c": None, "Leon_BDR__c": None, "Marat_BDR__c": None,
        "Loan_Partners__c": None, "Leon_Loan_Partner__c": None, "Marat__c": None,
        "MtgPlanner_CRM__Referred_By_Text__c": None,
        "MtgPlanner_CRM__Last_Touch__c": None, "Last_Touch_via_360_SMS__c": None,
        "Description": None,
        "RecordTypeId": "012MOCK01",
    },
    {
        "Id": "003MOCK000000004", "Name": "Maria Garcia", "FirstName": "Maria", "LastName": "Garcia",
        "Email": "maria.g@example.com", "Phone": "(555) 111-0004", "MobilePhone": "(555) 222-0004",
        "OwnerId": "005MOCK01", "Owner": {"Name": "Leon Belov"}, "CreatedDate": "2026-01-20T15:00:00.000Z",
        "LastModifiedDate": "2026-02-14T11:00:00.000Z", "LeadSource": "Realtor.com",
        "Status__c": "Active", "Temparture__c": "Hot", "No_of_Calls__c": "5",
        "Message_QuickUpdate__c": "Ready to lock rate", "Hot_Lead__c": True, "PAAL__c": True,
        "In_Process__c": True, "Is_Client__c": False, "MtgPlanner_CRM__Stage__c": "Processing",
        "MtgPlanner_CRM__Thank_you_to_Referral_Source__c": False,
        "BDR__c": None, "Leon_BDR__c": None, "Marat_BDR__c": None,
        "Loan_Partners__c": "Test LO", "Leon_Loan_Partner__c": "Test LO", "Marat__c": None,
        "MtgPlanner_CRM__Referred_By_Text__c": "Test Agent",
        "MtgPlanner_CRM__Last_Touch__c": "Spoke 2/14, rate lock discussion",
        "Last_Touch_via_360_SMS__c": "Texted 2/14: rate lock confirmed",
        "Description": "Purchase of new construction home in Scottsdale.",
        "RecordTypeId": "012MOCK01",
    },
    {
        "Id": "003MOCK000000005", "Name": "David Wilson", "FirstName": "David", "LastName": "Wilson",
        "Email": "david.w@example.com", "Phone": "(555) 111-0005", "MobilePhone": None,
        "OwnerId": "005MOCK02", "Owner": {"Name": "Marat Tsirelson"}, "CreatedDate": "2025-10-05T09:00:00.000Z",
        "LastModifiedDate": "2026-01-20T10:00:00.000Z", "LeadSource": "Referral",
        "Status__c": "Closed", "Temparture__c": "Cold", "No_of_Calls__c": "2",
        "Message_QuickUpdate__c": "Closed, funded", "Hot_Lead__c": False, "PAAL__c": False,
        "In_Process__c": False, "Is_Client__c": True, "MtgPlanner_CRM__Stage__c": "Closed",
        "MtgPlanner_CRM__Thank_you_to_Referral_Source__c": True,
        "BDR__c": None, "Leon_BDR__c": None, "Marat_BDR__c": None,
        "Loan_Partners__c": None, "Leon_Loan_Partner__c": None, "Marat__c": None,
        "MtgPlanner_CRM__Referred_By_Text__c": None,
        "MtgPlanner_CRM__Last_Touch__c": "Closing docs signed 1/20",
        "Last_Touch_via_360_SMS__c": None,
        "Description": "Refinance completed successfully.",
        "RecordTypeId": "012MOCK01",
    },
    {
        "Id": "003MOCK000000006", "Name": "Sarah Chen", "FirstName": "Sarah", "LastName": "Chen",
        "Email": "sarah.c@example.com", "Phone": "(555) 111-0006", "MobilePhone": "(555) 222-0006",
        "OwnerId": "005MOCK01", "Owner": {"Name": "Leon Belov"}, "CreatedDate": "2026-02-01T14:00:00.000Z",
        "LastModifiedDate": "2026-02-17T08:00:00.000Z", "LeadSource": "Zillow",
        "Status__c": "Follow Up", "Temparture__c": "Warm", "No_of_Calls__c": "2",
        "Message_QuickUpdate__c": "Scheduling appraisal", "Hot_Lead__c": False, "PAAL__c": False,
        "In_Process__c": True, "Is_Client__c": False, "MtgPlanner_CRM__Stage__c": "Underwriting",
        "MtgPlanner_CRM__Thank_you_to_Referral_Source__c": False,
        "BDR__c": None, "Leon_BDR__c": None, "Marat_BDR__c": None,
        "Loan_Partners__c": "Test LO", "Leon_Loan_Partner__c": None, "Marat__c": None,
        "MtgPlanner_CRM__Referred_By_Text__c": "Test Agent",
        "MtgPlanner_CRM__Last_Touch__c": "Appraisal scheduled for 2/20",
        "Last_Touch_via_360_SMS__c": None,
        "Description": "Purchase in Mesa, AZ. Appraisal ordered.",
        "RecordTypeId": "012MOCK01",
    },
    {
        "Id": "003MOCK000000007", "Name": "Michael Brown", "FirstName": "Michael", "LastName": "Brown",
        "Email": "michael.b@example.com", "Phone": "(555) 111-0007", "MobilePhone": None,
        "OwnerId": "005MOCK01", "Owner": {"Name": "Leon Belov"}, "CreatedDate": "2026-02-05T11:00:00.000Z",
        "LastModifiedDate": "2026-02-16T13:00:00.000Z", "LeadSource": "Website",
        "Status__c": "New", "Temparture__c": "Warm", "No_of_Calls__c": "1",
        "Message_QuickUpdate__c": None, "Hot_Lead__c": False, "PAAL__c": False,
        "In_Process__c": False, "Is_Client__c": False, "MtgPlanner_CRM__Stage__c": "Prospect",
        "MtgPlanner_CRM__Thank_you_to_Referral_Source__c": False,
        "BDR__c": None, "Leon_BDR__c": None, "Marat_BDR__c": None,
        "Loan_Partners__c": None, "Leon_Loan_Partner__c": None, "Marat__c": None,
        "MtgPlanner_CRM__Referred_By_Text__c": None,
        "MtgPlanner_CRM__Last_Touch__c": None, "Last_Touch_via_360_SMS__c": None,
        "Description": "Inquiry about VA loan.",
        "RecordTypeId": "012MOCK01",
    },
    {
        "Id": "003MOCK000000008", "Name": "Emily Davis", "FirstName": "Emily", "LastName": "Davis",
        "Email": "emily.d@example.com", "Phone": "(555) 111-0008", "MobilePhone": "(555) 222-0008",
        "OwnerId": "005MOCK01", "Owner": {"Name": "Leon Belov"}, "CreatedDate": "2026-01-25T16:00:00.000Z",
        "LastModifiedDate": "2026-02-12T10:00:00.000Z", "LeadSource": "Referral",
        "Status__c": "Active", "Temparture__c": "Hot", "No_of_Calls__c": "4",
        "Message_QuickUpdate__c": "Docs submitted", "Hot_Lead__c": True, "PAAL__c": False,
        "In_Process__c": True, "Is_Client__c": False, "MtgPlanner_CRM__Stage__c": "Application",
        "MtgPlanner_CRM__Thank_you_to_Referral_Source__c": False,
        "BDR__c": None, "Leon_BDR__c": None, "Marat_BDR__c": None,
        "Loan_Partners__c": "Test LO", "Leon_Loan_Partner__c": "Test LO", "Marat__c": None,
        "MtgPlanner_CRM__Referred_By_Text__c": "Test Agent",
        "MtgPlanner_CRM__Last_Touch__c": "Reviewed docs 2/12",
        "Last_Touch_via_360_SMS__c": "SMS: docs received, thank you!",
        "Description": "FHA purchase, good credit score.",
        "RecordTypeId": "012MOCK01",
    },
]

FAKE_TASKS: list[Record] = [
    {
        "Id": "00TMOCK000000001", "WhoId": "003MOCK000000001", "Subject": "Follow-up call",
        "ActivityDate": "2026-02-10", "Status": "Completed", "Description": "Called about rate options",
        "CreatedDate": "2026-02-10T10:00:00.000Z",
    },
    {
        "Id": "00TMOCK000000002", "WhoId": "003MOCK000000001", "Subject": "Send pre-approval letter",
        "ActivityDate": "2026-02-12", "Status": "Completed", "Description": "Emailed pre-approval",
        "CreatedDate": "2026-02-12T14:00:00.000Z",
    },
    {
        "Id": "00TMOCK000000003", "WhoId": "003MOCK000000006", "Subject": "Schedule appraisal",
        "ActivityDate": "2026-02-15", "Status": "In Progress", "Description": None,
        "CreatedDate": "2026-02-15T09:00:00.000Z",
    },
]

FAKE_HISTORY: list[Record] = [
    {
        "ContactId": "003MOCK000000001", "Field": "Status__c", "OldValue": "New", "NewValue": "Active",
        "CreatedDate": "2026-02-08T10:00:00.000Z", "CreatedBy": {"Name": "Leon Belov"},
    },
    {
        "ContactId": "003MOCK000000001", "Field": "Temparture__c", "OldValue": "Cold", "NewValue": "Warm",
        "CreatedDate": "2026-02-10T14:00:00.000Z", "CreatedBy": {"Name": "Leon Belov"},
    },
    {
        "ContactId": "003MOCK000000001", "Field": "MtgPlanner_CRM__Stage__c", "OldValue": "Prospect",
        "NewValue": "Application", "CreatedDate": "2026-02-12T09:00:00.000Z", "CreatedBy": {"Name": "Leon Belov"},
    },
]


def _options(*values: str) -> list[Record]:
    return [{"active": True, "value": v, "label": v} for v in values]


PICKLIST_VALUES: dict[str, list[Record]] = {
    "Status__c": _options("New", "Active", "Follow Up", "Closed", "Dead"),
    "Temparture__c": _options("Hot", "Warm", "Cold"),
    "No_of_Calls__c": _options("0", "1", "2", "3", "4", "5"),
    "MtgPlanner_CRM__Stage__c": _options("Prospect", "Application", "Processing", "Underwriting", "Closed"),
    "BDR__c": _options("Leon", "Marat"),
    "Leon_BDR__c": _options("Leon"),
    "Marat_BDR__c": _options("Marat"),
    "Loan_Partners__c": _options("Test LO"),
    "Leon_Loan_Partner__c": _options("Test LO"),
    "Marat__c": _options("Test LO"),
    "LeadSource": _options("Zillow", "Referral", "Website", "Realtor.com")
    + [{"active": False, "value": "Cold Call", "label": "Cold Call"}],
}


# ---------------------------------------------------------------------------
# SOQL subset
# ---------------------------------------------------------------------------

_TOKEN_RE = re.compile(
    r"""
    \s*(?:
        (?P<string>'(?:\\.|[^'\\])*')
      | (?P<datetime>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?Z)
      | (?P<number>-?\d+(?:\.\d+)?)
      | (?P<op><=|>=|!=|<>|=|<|>)
      | (?P<punct>[(),])
      | (?P<word>[A-Za-z_][A-Za-z0-9_.]*)
    )
    """,
    re.VERBOSE,
)

_ESCAPE_RE = re.compile(r"\\(.)")


class SoqlSyntaxError(CRMError):
    """The mock could not interpret the query (MALFORMED_QUERY upstream)."""


def _tokenize(soql: str) -> list[tuple[str, str]]:
    tokens: list[tuple[str, str]] = []
    pos = 0
    soql = soql.rstrip()
    while pos < len(soql):
        m = _TOKEN_RE.match(soql, pos)
        if not m or m.end() == pos:
            raise SoqlSyntaxError(f"MALFORMED_QUERY: unexpected input at {soql[pos:pos + 20]!r}")
        kind = m.lastgroup
        tokens.append((kind, m.group(kind)))
        pos = m.end()
    return tokens


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _get(record: Record, path: str) -> Any:
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _coerce_pair(left: Any, right: Any) -> tuple[Any, Any]:
    """Compare datetimes as datetimes when the literal is one."""
    if isinstance(right, datetime) and isinstance(left, str):
        return _parse_datetime(left), right
    return left, right


def _like_to_regex(pattern: str) -> re.Pattern:
    out = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\" and i + 1 < len(pattern):
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if ch == "%":
            out.append(".*")
        elif ch == "_":
            out.append(".")
        else:
            out.append(re.escape(ch))
        i += 1
    return re.compile("^" + "".join(out) + "$", re.IGNORECASE | re.DOTALL)


class _Parser:
    """Recursive descent over the token list.

    expr := term (OR term)* ; term := factor (AND factor)* ;
    factor := '(' expr ')' | field op value | field IN (values) | field LIKE string
    """

    def __init__(self, tokens: list[tuple[str, str]]):
        self.tokens = tokens
        self.pos = 0

    # -- token helpers --

    def peek(self) -> tuple[str, str] | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def next(self) -> tuple[str, str]:
        tok = self.peek()
        if tok is None:
            raise SoqlSyntaxError("MALFORMED_QUERY: unexpected end of query")
        self.pos += 1
        return tok

    def at_keyword(self, *words: str) -> bool:
        tok = self.peek()
        return tok is not None and tok[0] == "word" and tok[1].upper() in words

    def expect_keyword(self, word: str) -> None:
        kind, value = self.next()
        if kind != "word" or value.upper() != word:
            raise SoqlSyntaxError(f"MALFORMED_QUERY: expected {word}, got {value!r}")

    def expect_punct(self, punct: str) -> None:
        kind, value = self.next()
        if kind != "punct" or value != punct:
            raise SoqlSyntaxError(f"MALFORMED_QUERY: expected {punct!r}, got {value!r}")

    def identifier(self) -> str:
        kind, value = self.next()
        if kind != "word":
            raise SoqlSyntaxError(f"MALFORMED_QUERY: expected field name, got {value!r}")
        return value

    def literal(self) -> Any:
        kind, value = self.next()
        if kind == "string":
            return _ESCAPE_RE.sub(r"\1", value[1:-1])
        if kind == "datetime":
            return _parse_datetime(value)
        if kind == "number":
            return float(value) if "." in value else int(value)
        if kind == "word" and value.upper() in ("TRUE", "FALSE"):
            return value.upper() == "TRUE"
        if kind == "word" and value.upper() == "NULL":
            return None
        raise SoqlSyntaxError(f"MALFORMED_QUERY: expected a value, got {value!r}")

    # -- statement --

    def statement(self) -> dict[str, Any]:
        self.expect_keyword("SELECT")
        fields: list[str] = []
        count_only = False
        if self.at_keyword("COUNT"):
            self.next()
            self.expect_punct("(")
            self.expect_punct(")")
            count_only = True
        else:
            fields.append(self.identifier())
            while self.peek() == ("punct", ","):
                self.next()
                fields.append(self.identifier())

        self.expect_keyword("FROM")
        sobject = self.identifier()

        where: Predicate | None = None
        if self.at_keyword("WHERE"):
            self.next()
            where = self.expr()

        order_by: tuple[str, bool] | None = None
        if self.at_keyword("ORDER"):
            self.next()
            self.expect_keyword("BY")
            field = self.identifier()
            descending = False
            if self.at_keyword("ASC", "DESC"):
                descending = self.next()[1].upper() == "DESC"
            order_by = (field, descending)

        limit = offset = None
        if self.at_keyword("LIMIT"):
            self.next()
            limit = int(self.literal())
        if self.at_keyword("OFFSET"):
            self.next()
            offset = int(self.literal())

        if self.peek() is not None:
            raise SoqlSyntaxError(f"MALFORMED_QUERY: unexpected {self.peek()[1]!r}")

        return {
            "fields": fields,
            "count_only": count_only,
            "sobject": sobject,
            "where": where,
            "order_by": order_by,
            "limit": limit,
            "offset": offset,
        }

    # -- boolean expression --

    def expr(self) -> Predicate:
        terms = [self.term()]
        while self.at_keyword("OR"):
            self.next()
            terms.append(self.term())
        if len(terms) == 1:
            return terms[0]
        return lambda r: any(t(r) for t in terms)

    def term(self) -> Predicate:
        factors = [self.factor()]
        while self.at_keyword("AND"):
            self.next()
            factors.append(self.factor())
        if len(factors) == 1:
            return factors[0]
        return lambda r: all(f(r) for f in factors)

    def factor(self) -> Predicate:
        if self.peek() == ("punct", "("):
            self.next()
            inner = self.expr()
            self.expect_punct(")")
            return inner

        field = self.identifier()

        if self.at_keyword("IN"):
            self.next()
            self.expect_punct("(")
            values = [self.literal()]
            while self.peek() == ("punct", ","):
                self.next()
                values.append(self.literal())
            self.expect_punct(")")
            allowed = set(values)
            return lambda r: _get(r, field) in allowed

        if self.at_keyword("LIKE"):
            self.next()
            kind, raw = self.next()
            if kind != "string":
                raise SoqlSyntaxError("MALFORMED_QUERY: LIKE needs a string")
            regex = _like_to_regex(raw[1:-1])
            return lambda r: isinstance(_get(r, field), str) and bool(regex.match(_get(r, field)))

        kind, op = self.next()
        if kind != "op":
            raise SoqlSyntaxError(f"MALFORMED_QUERY: expected operator, got {op!r}")
        value = self.literal()
        return _comparison(field, op, value)


def _comparison(field: str, op: str, value: Any) -> Predicate:
    def check(record: Record) -> bool:
        left, right = _coerce_pair(_get(record, field), value)
        if op == "=":
            return left == right
        if op in ("!=", "<>"):
            return left != right
        if left is None or right is None:
            return False
        if op == "<":
            return left < right
        if op == "<=":
            return left <= right
        if op == ">":
            return left > right
        return left >= right

    return check


def parse_soql(soql: str) -> dict[str, Any]:
    return _Parser(_tokenize(soql)).statement()


def _project(record: Record, fields: list[str], sobject: str) -> Record:
    out: Record = {"attributes": {"type": sobject}}
    for field in fields:
        top = field.split(".")[0]
        out[top] = copy.deepcopy(record.get(top))
    return out


def _sort(records: list[Record], field: str, descending: bool) -> list[Record]:
    present = [r for r in records if _get(r, field) is not None]
    missing = [r for r in records if _get(r, field) is None]
    present.sort(key=lambda r: _get(r, field), reverse=descending)
    return present + missing


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class MockSalesforceClient:
    """Drop-in for ``SalesforceClient`` backed by fixture data.

    Each instance owns a deep copy of its fixtures; updates persist on the
    instance only.
    """

    def __init__(
        self,
        contacts: list[Record] | None = None,
        tasks: list[Record] | None = None,
        history: list[Record] | None = None,
        picklists: dict[str, list[Record]] | None = None,
    ):
        self._tables: dict[str, list[Record]] = {
            "Contact": copy.deepcopy(FAKE_CONTACTS if contacts is None else contacts),
            "Task": copy.deepcopy(FAKE_TASKS if tasks is None else tasks),
            "ContactHistory": copy.deepcopy(FAKE_HISTORY if history is None else history),
        }
        self._picklists = copy.deepcopy(PICKLIST_VALUES if picklists is None else picklists)
        self.queries: list[str] = []
        self.updates: list[list[Record]] = []

    @property
    def contacts(self) -> list[Record]:
        return self._tables["Contact"]

    async def query(self, soql: str) -> dict[str, Any]:
        self.queries.append(soql)
        stmt = parse_soql(soql)
        table = self._tables.get(stmt["sobject"])
        if table is None:
            raise SoqlSyntaxError(f"INVALID_TYPE: sObject type '{stmt['sobject']}' is not supported")

        rows = [r for r in table if stmt["where"] is None or stmt["where"](r)]
        if stmt["count_only"]:
            return {"totalSize": len(rows), "done": True, "records": []}

        total = len(rows)
        if stmt["order_by"]:
            rows = _sort(rows, *stmt["order_by"])
        offset = stmt["offset"] or 0
        rows = rows[offset:]
        if stmt["limit"] is not None:
            rows = rows[: stmt["limit"]]
        return {
            "totalSize": total,
            "done": True,
            "records": [_project(r, stmt["fields"], stmt["sobject"]) for r in rows],
        }

    async def update_records(self, sobject: str, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
        self.updates.append(copy.deepcopy(records))
        table = self._tables.get(sobject, [])
        by_id = {r["Id"]: r for r in table}
        results = []
        for rec in records:
            target = by_id.get(rec.get("Id"))
            if target is None:
                results.append(
                    {
                        "id": rec.get("Id"),
                        "success": False,
                        "errors": [
                            {
                                "statusCode": "INVALID_CROSS_REFERENCE_KEY",
                                "message": "invalid cross reference id",
                                "fields": [],
                            }
                        ],
                    }
                )
                continue
            target.update({k: v for k, v in rec.items() if k not in ("Id", "attributes")})
            target["LastModifiedDate"] = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.000Z")
            results.append({"id": target["Id"], "success": True, "errors": []})
        return results

    async def describe(self, sobject: str) -> dict[str, Any]:
        fields = [
            {
                "name": name,
                "label": name.removesuffix("__c").replace("_", " "),
                "type": "picklist",
                "picklistValues": copy.deepcopy(values),
            }
            for name, values in self._picklists.items()
        ]
        return {"name": sobject, "fields": fields}

    async def aclose(self) -> None:
        return None
