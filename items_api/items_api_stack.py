from aws_cdk import (
    Stack,
    aws_dynamodb as dynamodb,
    aws_lambda as _lambda,
    aws_apigateway as apigw,
    CfnOutput,
)
from constructs import Construct

from items_api.config import StackSettings

class ItemsApiStack(Stack):

    def __init__(self, scope: Construct, id: str, *, settings: StackSettings, **kwargs) -> None:
        super().__init__(scope, id, **kwargs)

        # Items table, single string partition key
        self.table = dynamodb.Table(self, "items",
            partition_key=dynamodb.Attribute(name=settings.partition_key, type=dynamodb.AttributeType.STRING),
            table_name=settings.table_name,
            removal_policy=settings.cdk_removal_policy,
        )

        # CRUD function, prebuilt artifact
        compute = settings.compute
        self.function = _lambda.Function(self, "itemsLambda",
            runtime=compute.lambda_runtime,
            architecture=compute.lambda_architecture,
            code=_lambda.Code.from_asset(compute.asset_path),
            handler=compute.handler,
            environment={
                "PK": settings.partition_key,
                "TABLE_NAME": self.table.table_name,
            },
        )

        self.table.grant_read_write_data(self.function)

        # API Gateway, every method and path proxied to the function.
        # No account-level CloudWatch role: it is retained on stack deletion.
        self.api = apigw.LambdaRestApi(self, "itemsApi",
            handler=self.function,
            cloud_watch_role=False,
        )

        CfnOutput(self, "TableName", value=self.table.table_name)
        CfnOutput(self, "ApiUrl", value=self.api.url)
