import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from .admission import ReservationAdmission
from .errors import AuthError, NotFoundError
from .responses import error_to_response, get_header, parse_json, resp
from .validation import coerce_table_id, ensure, require_fields

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], Dict[str, Any]]

TABLE_FIELDS = ("id", "number", "places", "isVip", "minOrder")


def _pattern(resource: str) -> re.Pattern:
    # /tables/{tableId} -> ^/tables/(?P<tableId>[^/]+)$
    return re.compile("^" + re.sub(r"\{(\w+)\}", r"(?P<\1>[^/]+)", resource) + "/?$")


class Route:
    def __init__(self, method: str, resource: str, fn: Handler, protected: bool):
        self.method = method
        self.resource = resource
        self.fn = fn
        self.protected = protected
        self.regex = _pattern(resource)


class ReservationApi:
    """Maps (resource, method) pairs from API Gateway proxy events to operations."""

    def __init__(self, tables, reservations, identity, admission: Optional[ReservationAdmission] = None):
        self.tables = tables
        self.reservations = reservations
        self.identity = identity
        self.admission = admission or ReservationAdmission(tables, reservations)
        self.routes: List[Route] = []

        self.add("POST", "/signup", self.handle_signup, protected=False)
        self.add("POST", "/signin", self.handle_signin, protected=False)
        self.add("GET", "/tables", self.handle_tables_get)
        self.add("POST", "/tables", self.handle_tables_post)
        self.add("GET", "/tables/{tableId}", self.handle_table_get)
        self.add("GET", "/reservations", self.handle_reservations_get)
        self.add("POST", "/reservations", self.handle_reservations_post)

    def add(self, method: str, resource: str, fn: Handler, protected: bool = True):
        self.routes.append(Route(method, resource, fn, protected))

    def match(self, method: str, resource: Optional[str], path: str) -> Tuple[Optional[Route], Dict[str, str]]:
        candidates = [r for r in self.routes if r.method == method]
        for route in candidates:
            if resource and route.resource == resource:
                return route, {}
        # Proxy resources ({proxy+}) and hand-built events only carry the path
        for route in candidates:
            m = route.regex.match(path)
            if m:
                return route, m.groupdict()
        return None, {}

    # ---- Router ---------------------------------------------------------------

    def __call__(self, event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
        try:
            method = (event.get("httpMethod") or "").upper()
            path = event.get("path") or "/"
            resource = event.get("resource")

            if method == "OPTIONS":
                return resp(200, {"ok": True})

            route, params = self.match(method, resource, path)
            if route is None:
                logger.info("No route for %s %s", method, resource or path)
                return resp(404, {"error": "NotFound", "path": path, "method": method})

            logger.info("Route: %s %s", route.method, route.resource)
            if route.protected and not get_header(event, "Authorization"):
                raise AuthError("missing authorization token")

            if params:
                event = dict(event, pathParameters={**(event.get("pathParameters") or {}), **params})
            return route.fn(event)
        except Exception as e:
            return error_to_response(e)

    # ---- Identity -------------------------------------------------------------

    def handle_signup(self, event: Dict[str, Any]) -> Dict[str, Any]:
        return resp(200, self.identity.sign_up(parse_json(event)))

    def handle_signin(self, event: Dict[str, Any]) -> Dict[str, Any]:
        return resp(200, self.identity.sign_in(parse_json(event)))

    # ---- Tables ---------------------------------------------------------------

    def handle_tables_get(self, event: Dict[str, Any]) -> Dict[str, Any]:
        return resp(200, {"tables": self.tables.list()})

    def handle_tables_post(self, event: Dict[str, Any]) -> Dict[str, Any]:
        data = parse_json(event)
        require_fields(data, ("id",))
        item = {k: data.get(k) for k in TABLE_FIELDS}
        item["id"] = coerce_table_id(data["id"])
        is_vip = data.get("isVip")
        if is_vip is None:
            is_vip = False
        ensure(isinstance(is_vip, bool), "isVip must be a boolean", field="isVip")
        item["isVip"] = is_vip
        self.tables.put(item)
        return resp(200, {"id": item["id"]})

    def handle_table_get(self, event: Dict[str, Any]) -> Dict[str, Any]:
        raw_id = (event.get("pathParameters") or {}).get("tableId")
        item = self.tables.get(coerce_table_id(raw_id, field="tableId"))
        if item is None:
            raise NotFoundError("table not found")
        return resp(200, item)

    # ---- Reservations ---------------------------------------------------------

    def handle_reservations_get(self, event: Dict[str, Any]) -> Dict[str, Any]:
        return resp(200, {"reservations": self.reservations.list()})

    def handle_reservations_post(self, event: Dict[str, Any]) -> Dict[str, Any]:
        reservation_id = self.admission.admit(parse_json(event))
        return resp(200, {"reservationId": reservation_id})
