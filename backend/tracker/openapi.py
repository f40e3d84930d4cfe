"""Minimal deterministic OpenAPI document.

Schemas are derived from the domain dataclasses (camelCase, as on the wire);
transition endpoints carry `x-allowed-roles` read from the policy table, so
the document cannot drift from what the engine enforces.
"""
from dataclasses import fields
from typing import Any, Dict, List, Tuple

from tracker.domain import Invoice, Order, PartRequest, Profile, PurchaseOrder, QCReport, RepairLog, Sparepart
from tracker.services.policy import Action, View, roles_for
from tracker.services.workflow import ORDER_FSM, PART_REQUEST_FSM
from tracker.store.casing import camel_key

__all__ = ["build_openapi_spec"]

_TYPES = {"int": "integer", "float": "number", "str": "string", "bool": "boolean"}

ENTITIES = (Order, RepairLog, Sparepart, PartRequest, PurchaseOrder, QCReport, Invoice, Profile)

# (path, summary, action)
TRANSITIONS: Tuple[Tuple[str, str, str], ...] = (
    ("/orders/{serviceId}/diagnosis", "Submit diagnosis", Action.SUBMIT_DIAGNOSIS),
    ("/orders/{serviceId}/part-requests", "Request parts", Action.REQUEST_PARTS),
    ("/orders/{serviceId}/approve", "Approve pending part requests", Action.APPROVE_PARTS),
    ("/orders/{serviceId}/reject", "Reject pending part requests", Action.REJECT_PARTS),
    ("/orders/{serviceId}/purchase-orders", "Confirm purchase order", Action.CONFIRM_PURCHASE_ORDER),
    ("/orders/{serviceId}/logs", "Add repair log", Action.ADD_LOG),
    ("/orders/{serviceId}/complete", "Complete repair", Action.COMPLETE_REPAIR),
    ("/orders/{serviceId}/inspection", "Submit QC inspection", Action.SUBMIT_INSPECTION),
    ("/orders/{serviceId}/payment", "Confirm payment", Action.CONFIRM_PAYMENT),
    ("/part-requests/{serviceId}/approve", "Approve from the part-request ledger", Action.APPROVE_PARTS),
    ("/part-requests/{serviceId}/reject", "Reject from the part-request ledger", Action.REJECT_PARTS),
    ("/spareparts/{partId}/stock", "Add stock", Action.ADD_STOCK),
    ("/spareparts/{partId}/purchase-request", "Request purchase", Action.REQUEST_PURCHASE),
)

# (path, summary, views)
LISTS: Tuple[Tuple[str, str, List[str]], ...] = (
    ("/orders", "Kanban board", [View.DASHBOARD]),
    ("/part-requests", "Part requests grouped by order", [View.PART_REQUESTS]),
    ("/spareparts", "Spare parts", [View.SPAREPARTS]),
    ("/purchase-orders", "Purchase orders", [View.PART_REQUESTS, View.SPAREPARTS]),
    ("/reports/qc", "QC reports", [View.QC]),
    ("/reports/invoices", "Invoices with totals", [View.FINANCE]),
)


def _schema(cls) -> Dict[str, Any]:
    props = {}
    for f in fields(cls):
        if f.name == "password_hash":
            continue
        kind = f.type if isinstance(f.type, str) else getattr(f.type, "__name__", None)
        if f.name == "repair_logs":
            props[camel_key(f.name)] = {"type": "array", "items": {"$ref": "#/components/schemas/RepairLog"}}
        else:
            props[camel_key(f.name)] = {"type": _TYPES.get(kind, "string")}
    return {"type": "object", "properties": props}


def _path_params(path: str) -> List[Dict[str, Any]]:
    names = [seg[1:-1] for seg in path.split("/") if seg.startswith("{")]
    return [{"name": n, "in": "path", "required": True, "schema": {"type": "string"}} for n in names]


def _errors() -> Dict[str, Any]:
    return {
        str(code): {"$ref": f"#/components/responses/{name}"}
        for code, name in ((400, "BadRequest"), (401, "Unauthorized"), (403, "Forbidden"),
                           (404, "NotFound"), (409, "Conflict"), (503, "StoreUnavailable"))
    }


def build_openapi_spec() -> Dict[str, Any]:
    schemas = {cls.__name__: _schema(cls) for cls in ENTITIES}
    schemas["Order"]["x-transitions"] = {k: sorted(v) for k, v in ORDER_FSM.graph.items()}
    schemas["PartRequest"]["x-transitions"] = {k: sorted(v) for k, v in PART_REQUEST_FSM.graph.items()}
    schemas["Pagination"] = {
        "type": "object",
        "properties": {
            "total": {"type": "integer"},
            "limit": {"type": "integer"},
            "offset": {"type": "integer"},
            "returned": {"type": "integer"},
        },
        "required": ["total", "limit", "offset", "returned"],
    }
    schemas["Error"] = {
        "type": "object",
        "properties": {"error": {"type": "object", "properties": {
            "status": {"type": "integer"}, "title": {"type": "string"}, "detail": {"type": "string"},
        }}},
        "required": ["error"],
    }
    error_ref = {"application/json": {"schema": {"$ref": "#/components/schemas/Error"}}}
    components: Dict[str, Any] = {
        "schemas": schemas,
        "responses": {
            name: {"description": desc, "content": error_ref}
            for name, desc in (("BadRequest", "Bad Request"), ("Unauthorized", "Unauthorized"),
                               ("Forbidden", "Forbidden"), ("NotFound", "Not Found"),
                               ("Conflict", "Version conflict"), ("StoreUnavailable", "Store Unavailable"))
        },
        "securitySchemes": {"BearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}},
        "parameters": {
            "LimitParam": {"name": "limit", "in": "query", "schema": {"type": "integer", "default": 50}},
            "OffsetParam": {"name": "offset", "in": "query", "schema": {"type": "integer", "default": 0}},
            "IfMatch": {"name": "If-Match", "in": "header", "schema": {"type": "string"},
                        "description": "Order version the client acted on"},
        },
    }

    paths: Dict[str, Any] = {
        "/auth/signup": {"post": {"summary": "Sign up", "security": [], "responses": {"201": {"description": "Profile created"}}}},
        "/auth/login": {"post": {"summary": "Login", "security": [], "responses": {"200": {"description": "JWT issued"}}}},
        "/auth/logout": {"post": {"summary": "Logout", "responses": {"200": {"description": "Token revoked"}}}},
        "/auth/me": {"get": {"summary": "Current profile and views", "responses": {"200": {"description": "OK"}}}},
        "/orders/{serviceId}": {"get": {"summary": "Order detail", "x-required-views": [View.DASHBOARD],
                                        "responses": {"200": {"description": "OK", "headers": {"ETag": {"schema": {"type": "string"}}}}}}},
        "/orders/{serviceId}/actions": {"get": {"summary": "Actions available to the caller", "x-required-views": [View.DASHBOARD],
                                                "responses": {"200": {"description": "OK"}}}},
        "/portal/orders/{serviceId}": {"get": {"summary": "Customer status timeline",
                                               "x-required-views": [View.CUSTOMER_PORTAL, View.DASHBOARD],
                                               "responses": {"200": {"description": "OK"}}}},
    }
    for path, summary, views in LISTS:
        paths[path] = {"get": {
            "summary": summary,
            "x-required-views": views,
            "parameters": [{"$ref": "#/components/parameters/LimitParam"}, {"$ref": "#/components/parameters/OffsetParam"}],
            "responses": {"200": {"description": "OK", "headers": {"ETag": {"schema": {"type": "string"}}}},
                          "304": {"description": "Not Modified"}},
        }}
    paths["/orders"]["post"] = {
        "summary": "Create service order",
        "x-allowed-roles": roles_for(Action.CREATE_ORDER),
        "responses": {"201": {"description": "Created"}, **_errors()},
    }
    for path, summary, action in TRANSITIONS:
        params = _path_params(path)
        if path.startswith("/orders/") or path.startswith("/part-requests/"):
            params.append({"$ref": "#/components/parameters/IfMatch"})
        paths[path] = {"post": {
            "summary": summary,
            "x-action": action,
            "x-allowed-roles": roles_for(action),
            "parameters": params,
            "responses": {"200": {"description": "Applied"}, **_errors()},
        }}

    tags = set()
    for path, ops in paths.items():
        tag = path.split("/")[1].capitalize()
        tags.add(tag)
        for method, od in ops.items():
            rid = path.strip("/").replace("/", "_").replace("{", "").replace("}", "").replace("-", "_")
            od["operationId"] = f"{method}_{rid}"
            od["tags"] = [tag]

    return {
        "openapi": "3.0.3",
        "info": {"title": "Equipment Service Tracker API", "version": "0.1.0"},
        "paths": dict(sorted(paths.items())),
        "components": components,
        "security": [{"BearerAuth": []}],
        "tags": [{"name": n, "description": f"{n} endpoints"} for n in sorted(tags)],
    }
