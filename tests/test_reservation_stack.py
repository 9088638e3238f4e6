"""
CDK stack unit tests: the synthesized template carries the stores, the user
pool and the routes the handler expects.

Skipped unless aws-cdk-lib and a Node.js runtime are available.
"""

import shutil

import pytest

if shutil.which("node") is None:
    pytest.skip("CDK synthesis needs Node.js", allow_module_level=True)

cdk = pytest.importorskip("aws_cdk")
assertions = pytest.importorskip("aws_cdk.assertions")

from infra.stacks.reservation_stack import SLOT_INDEX, ReservationStack  # noqa: E402


@pytest.fixture(scope="module")
def template():
    app = cdk.App()
    stack = ReservationStack(
        app,
        "TestReservationStack",
        env=cdk.Environment(account="123456789012", region="eu-central-1"),
    )
    return assertions.Template.from_stack(stack)


@pytest.mark.cdk
def test_dynamodb_tables(template):
    template.resource_count_is("AWS::DynamoDB::Table", 2)
    template.has_resource_properties(
        "AWS::DynamoDB::Table",
        {"KeySchema": [{"AttributeName": "id", "KeyType": "HASH"}]},
    )
    template.has_resource_properties(
        "AWS::DynamoDB::Table",
        {
            "KeySchema": [{"AttributeName": "reservationId", "KeyType": "HASH"}],
            "GlobalSecondaryIndexes": [
                assertions.Match.object_like({
                    "IndexName": SLOT_INDEX,
                    "KeySchema": [
                        {"AttributeName": "slotKey", "KeyType": "HASH"},
                        {"AttributeName": "slotTimeStart", "KeyType": "RANGE"},
                    ],
                })
            ],
        },
    )


@pytest.mark.cdk
def test_user_pool_password_policy(template):
    template.has_resource_properties(
        "AWS::Cognito::UserPool",
        {
            "Policies": {
                "PasswordPolicy": assertions.Match.object_like({
                    "MinimumLength": 12,
                    "RequireNumbers": True,
                    "RequireSymbols": True,
                })
            }
        },
    )
    template.has_resource_properties(
        "AWS::Cognito::UserPoolClient",
        {"ExplicitAuthFlows": assertions.Match.array_with(["ALLOW_ADMIN_USER_PASSWORD_AUTH"])},
    )


@pytest.mark.cdk
def test_lambda_environment(template):
    template.has_resource_properties(
        "AWS::Lambda::Function",
        {
            "Handler": "app.handler",
            "Runtime": "python3.12",
            "Environment": {
                "Variables": assertions.Match.object_like({
                    "RESERVATIONS_SLOT_INDEX": SLOT_INDEX,
                    "LOG_LEVEL": "INFO",
                })
            },
        },
    )


@pytest.mark.cdk
def test_routes_and_authorizer(template):
    for path in ("signup", "signin", "tables", "{tableId}", "reservations"):
        template.has_resource_properties("AWS::ApiGateway::Resource", {"PathPart": path})
    template.resource_count_is("AWS::ApiGateway::Authorizer", 1)
    template.has_resource_properties(
        "AWS::ApiGateway::Method",
        {"HttpMethod": "POST", "AuthorizationType": "COGNITO_USER_POOLS"},
    )
