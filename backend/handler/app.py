import boto3

from restaurant_api.admission import ReservationAdmission
from restaurant_api.config import Settings, configure_logging
from restaurant_api.identity import CognitoIdentity
from restaurant_api.routes import ReservationApi
from restaurant_api.stores import DynamoReservationLedger, DynamoTableDirectory

SETTINGS = Settings.from_env()
logger = configure_logging(SETTINGS.log_level)

_api = None


def build_api(settings: Settings) -> ReservationApi:
    ddb = boto3.resource("dynamodb")
    tables = DynamoTableDirectory(ddb.Table(settings.tables_table))
    reservations = DynamoReservationLedger(ddb.Table(settings.reservations_table), settings.slot_index)
    identity = CognitoIdentity(boto3.client("cognito-idp"), settings.user_pool_id, settings.client_id)
    return ReservationApi(tables, reservations, identity, ReservationAdmission(tables, reservations))


def handler(event, context):
    """
    Lambda proxy integration with API Gateway.
    `event` carries resource, httpMethod, path, pathParameters, headers and body.
    """
    global _api
    if _api is None:
        # Clients are reused across warm invocations of the same container
        _api = build_api(SETTINGS)
    return _api(event, context)
