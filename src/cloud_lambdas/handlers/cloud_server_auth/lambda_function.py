"""Lambda entrypoint of the cloud server auth proxy.

The configuration is loaded on import, so a missing or invalid
`CLOUD_SERVER` or `MATTERMOST_WEBHOOK` fails the cold start.
"""

from cloud_lambdas.handlers.cloud_server_auth.config import CloudServerAuthConfig
from cloud_lambdas.handlers.cloud_server_auth.proxy import CloudServerAuthProxy

proxy = CloudServerAuthProxy(config=CloudServerAuthConfig.from_env())
proxy.add_logger_to_root()

handler = proxy.get_lambda_handler()
