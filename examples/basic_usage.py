"""
Example: Basic OData usage with simple_odata
============================================

This example shows how to build filtered list queries.
"""

import asyncio

from simple_odata import ConnectionContext, ODataClient, escape_odata_literal


async def example_basic_query():
    """Custom parameters and a bearer token."""

    client = ODataClient(
        "https://api.example.com/odata",
        custom_key_value_pairs=[{"keyName": "$format", "keyValue": "json"}],
        token="<token>",
    )
    customer = "O'Brien"

    resp = await (
        client.endpoint("Orders")
        .filters([
            {"propertyName": "Status", "propertyValue": "open"},
            {"propertyName": "Amount", "propertyValue": 100, "operator": "ge"},
            f"CustomerName eq '{escape_odata_literal(customer)}'",
        ])
        .select(["OrderID", "Status", "Amount"])
        .order_by(["Amount desc"])
        .count(50)
        .get()
    )
    print(resp.status, resp.data)

    # Builder state is kept: clear it before an unrelated query
    client.reset()


async def example_subscription_gateway():
    """Gateway convention: subscription key and api-version parameters."""

    client = ODataClient.with_subscription(
        "https://gateway.example.com/sales",
        subscription_key={"keyName": "subscription-key", "subscriptionKey": "<key>"},
        api_version={"apiVersionName": "api-version", "version": "2021-06-01"},
    )
    resp = await client.endpoint("Customers").search("blue").count().get()
    print(resp.status, resp.data)


async def example_connection_context():
    """Reads ODATA_API_ROOT, ODATA_BEARER_TOKEN, ... from the environment or .env."""
    with ConnectionContext() as conn:
        resp = await conn.client().endpoint("Orders").count(10).get()
        print(resp.data)


if __name__ == "__main__":
    # Uncomment the example you want to run
    # asyncio.run(example_basic_query())
    # asyncio.run(example_subscription_gateway())
    # asyncio.run(example_connection_context())

    print("Set up your environment variables and uncomment an example to run.")
    print("Required: ODATA_API_ROOT (plus ODATA_BEARER_TOKEN or ODATA_SUBSCRIPTION_KEY)")
