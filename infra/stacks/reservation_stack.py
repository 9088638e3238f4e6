# infra/stacks/reservation_stack.py

import os

from aws_cdk import (
    Stack,
    Duration,
    RemovalPolicy,
    CfnOutput,
    aws_iam as iam,
    aws_lambda as _lambda,
    aws_apigateway as apigw,
    aws_cognito as cognito,
    aws_dynamodb as dynamodb,
)
from constructs import Construct

HANDLER_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "..", "backend", "handler")
SLOT_INDEX = "slot-index"


class ReservationStack(Stack):
    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # =========
        # Context
        # =========
        stack_name_ctx = self.node.try_get_context("stackName") or "RestaurantReservations"
        use_authorizer_ctx = self.node.try_get_context("useCognitoAuthorizer")
        if use_authorizer_ctx is None:
            use_authorizer_ctx = True  # default: gateway verifies tokens

        # =========
        # DynamoDB
        # =========
        tables_table = dynamodb.Table(
            self,
            "TablesTable",
            partition_key=dynamodb.Attribute(name="id", type=dynamodb.AttributeType.NUMBER),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            removal_policy=RemovalPolicy.DESTROY,  # dev-friendly; switch to RETAIN for prod
        )

        reservations_table = dynamodb.Table(
            self,
            "ReservationsTable",
            partition_key=dynamodb.Attribute(name="reservationId", type=dynamodb.AttributeType.STRING),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            point_in_time_recovery=True,
            removal_policy=RemovalPolicy.DESTROY,
        )
        # Overlap checks query one table+date (slotKey) ordered by start time
        reservations_table.add_global_secondary_index(
            index_name=SLOT_INDEX,
            partition_key=dynamodb.Attribute(name="slotKey", type=dynamodb.AttributeType.STRING),
            sort_key=dynamodb.Attribute(name="slotTimeStart", type=dynamodb.AttributeType.STRING),
            projection_type=dynamodb.ProjectionType.ALL,
        )

        # =========
        # Cognito
        # =========
        user_pool = cognito.UserPool(
            self,
            "UserPool",
            self_sign_up_enabled=False,  # users are created by the API with admin calls
            sign_in_aliases=cognito.SignInAliases(email=True),
            password_policy=cognito.PasswordPolicy(
                min_length=12,
                require_digits=True,
                require_symbols=True,
                require_lowercase=False,
                require_uppercase=False,
            ),
            account_recovery=cognito.AccountRecovery.EMAIL_ONLY,
            removal_policy=RemovalPolicy.DESTROY,
        )

        user_pool_client = cognito.UserPoolClient(
            self,
            "UserPoolClient",
            user_pool=user_pool,
            generate_secret=False,
            auth_flows=cognito.AuthFlow(admin_user_password=True, user_password=True),
            prevent_user_existence_errors=True,
        )

        # =============
        # Lambda (API)
        # =============
        api_lambda = _lambda.Function(
            self,
            "ApiLambda",
            runtime=_lambda.Runtime.PYTHON_3_12,
            handler="app.handler",
            code=_lambda.Code.from_asset(HANDLER_DIR),
            memory_size=256,
            timeout=Duration.seconds(10),
            environment={
                "TABLES_TABLE": tables_table.table_name,
                "RESERVATIONS_TABLE": reservations_table.table_name,
                "RESERVATIONS_SLOT_INDEX": SLOT_INDEX,
                "USER_POOL_ID": user_pool.user_pool_id,
                "CLIENT_ID": user_pool_client.user_pool_client_id,
                "LOG_LEVEL": "INFO",
            },
        )
        tables_table.grant_read_write_data(api_lambda)
        reservations_table.grant_read_write_data(api_lambda)
        api_lambda.add_to_role_policy(
            iam.PolicyStatement(
                actions=[
                    "cognito-idp:AdminCreateUser",
                    "cognito-idp:AdminSetUserPassword",
                    "cognito-idp:AdminInitiateAuth",
                ],
                resources=[user_pool.user_pool_arn],
            )
        )

        # ==========================
        # API Gateway + Authorizer
        # ==========================
        api = apigw.RestApi(
            self,
            "Api",
            deploy_options=apigw.StageOptions(
                stage_name="api",
                throttling_rate_limit=50,
                throttling_burst_limit=100,
            ),
            default_cors_preflight_options=apigw.CorsOptions(
                allow_origins=apigw.Cors.ALL_ORIGINS,
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
            ),
        )
        integration = apigw.LambdaIntegration(api_lambda)

        protected = {}
        if use_authorizer_ctx:
            authorizer = apigw.CognitoUserPoolsAuthorizer(
                self, "ApiUserAuthorizer", cognito_user_pools=[user_pool]
            )
            protected = {
                "authorization_type": apigw.AuthorizationType.COGNITO,
                "authorizer": authorizer,
            }

        api.root.add_resource("signup").add_method("POST", integration)
        api.root.add_resource("signin").add_method("POST", integration)

        tables = api.root.add_resource("tables")
        tables.add_method("GET", integration, **protected)
        tables.add_method("POST", integration, **protected)
        tables.add_resource("{tableId}").add_method("GET", integration, **protected)

        reservations = api.root.add_resource("reservations")
        reservations.add_method("GET", integration, **protected)
        reservations.add_method("POST", integration, **protected)

        # =======
        # Outputs
        # =======
        CfnOutput(self, "StackName", value=stack_name_ctx)
        CfnOutput(self, "TablesTableName", value=tables_table.table_name)
        CfnOutput(self, "ReservationsTableName", value=reservations_table.table_name)
        CfnOutput(self, "ApiUrl", value=api.url)
        CfnOutput(self, "UserPoolId", value=user_pool.user_pool_id)
        CfnOutput(self, "UserPoolClientId", value=user_pool_client.user_pool_client_id)
