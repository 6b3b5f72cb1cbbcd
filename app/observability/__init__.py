"""Observability for the demo API.

Remote log shipping to Logstash (``log_shipper``), Prometheus metrics, and a
request middleware that ties request IDs, access logs and HTTP metrics together.
"""
