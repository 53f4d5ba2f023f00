#!/usr/bin/env python3
import logging

import aws_cdk as cdk

from items_api.config import StackSettings
from items_api.items_api_stack import ItemsApiStack

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

app = cdk.App()
ItemsApiStack(app, "ItemsApiStack", settings=StackSettings.from_context(app.node))

app.synth()
