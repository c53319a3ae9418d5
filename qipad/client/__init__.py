"""Client Core - request helper, query cache, mutations, auth session and flows.

Invariants:
    - One QueryClient, one AuthContext and one TokenStore per client session,
      built together by QipadClient and passed explicitly (no module globals)
    - Every network call goes through ApiClient; every write goes through a
      Mutation or a flow built on ApiClient

Design Decisions:
    - Async-first on a single event loop: cache state is touched only from the
      loop, so it needs no locks
"""
