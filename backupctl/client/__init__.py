"""
Coordinator Client Module.

gRPC access to the backup coordinator:
- protocol: wire messages and the Api stub
- interceptors: call middleware, bearer credentials
- transport: channel setup (TLS, compression)
- collector: draining server streams
- coordinator: typed client used by commands
"""
