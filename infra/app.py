#!/usr/bin/env python3
import os
import aws_cdk as cdk
from stacks.reservation_stack import ReservationStack

app = cdk.App()

env = cdk.Environment(
    account=os.getenv("CDK_DEFAULT_ACCOUNT"),
    region=os.getenv("CDK_DEFAULT_REGION", "eu-central-1"),
)

ReservationStack(app, "RestaurantReservations", env=env)

app.synth()
