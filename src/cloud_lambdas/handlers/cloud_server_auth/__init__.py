"""Authenticating reverse proxy for the cloud server API.

Only an allow-listed set of paths is relayed to the cloud server. Every
rejected or failed request is reported to a Mattermost webhook.
"""
