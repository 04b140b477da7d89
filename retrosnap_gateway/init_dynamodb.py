"""DynamoDB table initialization for the gateway.

Creates the tables the gateway needs:
- accounts: credit accounts keyed by identity-provider subject, with an
  email index for admin lookups
"""
import logging
from typing import List

import aioboto3
from botocore.exceptions import ClientError

from retrosnap_gateway.config import settings
from retrosnap_gateway.repositories.dynamodb_account_store import EMAIL_INDEX_NAME

logger = logging.getLogger(__name__)


async def initialize_all_tables() -> List[str]:
    """Create all DynamoDB tables if they don't exist."""

    session = aioboto3.Session()
    resource_config = {
        'endpoint_url': settings.DYNAMODB_ENDPOINT,
        'region_name': settings.DYNAMODB_REGION,
        'aws_access_key_id': settings.DYNAMODB_ACCESS_KEY,
        'aws_secret_access_key': settings.DYNAMODB_SECRET_KEY
    }

    async with session.resource('dynamodb', **resource_config) as dynamodb:
        tables_created = []

        if await create_accounts_table(dynamodb, settings.ACCOUNTS_TABLE_NAME):
            tables_created.append(settings.ACCOUNTS_TABLE_NAME)

        return tables_created


async def create_accounts_table(dynamodb, table_name: str) -> bool:
    """Create the accounts table. Returns False if it already exists."""
    try:
        logger.info(f"Creating '{table_name}' table...")
        table = await dynamodb.create_table(
            TableName=table_name,
            KeySchema=[
                {'AttributeName': 'user_id', 'KeyType': 'HASH'}
            ],
            AttributeDefinitions=[
                {'AttributeName': 'user_id', 'AttributeType': 'S'},
                {'AttributeName': 'email_key', 'AttributeType': 'S'}
            ],
            GlobalSecondaryIndexes=[
                {
                    'IndexName': EMAIL_INDEX_NAME,
                    'KeySchema': [
                        {'AttributeName': 'email_key', 'KeyType': 'HASH'}
                    ],
                    'Projection': {'ProjectionType': 'ALL'}
                }
            ],
            BillingMode='PAY_PER_REQUEST'
        )
        await table.wait_until_exists()
        logger.info(f"✅ '{table_name}' table created")
        return True
    except ClientError as e:
        if e.response['Error']['Code'] == 'ResourceInUseException':
            logger.info(f"✓ '{table_name}' table already exists")
            return False
        raise
