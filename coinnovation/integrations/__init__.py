"""coinnovation.integrations — outbound data access.

All reads of the process and project data sources go through
``data_source_gateway.DataSourceGateway``, never via bare ``requests``
calls in services or blueprints.
"""
