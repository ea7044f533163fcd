"""TaskHub API package.

Bundles the HTTP inbox surface together with the background workers that
fan domain events out into notifications and push deliveries.
"""
