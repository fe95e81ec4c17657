# App entry point (the factory builds stores, services and the hub)
wsgi_app = "revint:create_app()"

# Bind & workers
bind = "0.0.0.0:8000"
# The connection hub lives in-process: a second worker would not see the
# pipes opened on the first one.
workers = 1
worker_class = "gthread"
threads = 16  # each open WebSocket pipe holds one thread
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = "info"  # override with env LOG_LEVEL

# Trust proxy headers
forwarded_allow_ips = "*"
proxy_protocol = False
