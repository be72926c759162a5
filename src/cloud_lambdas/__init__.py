"""Cloud operations AWS Lambda functions.

Provides the handler framework shared by the cloud operations lambdas,
the chat webhook notification capability, and the cloud server auth proxy.
"""
