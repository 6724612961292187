# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# business rules and database access for a single aggregate:
#
#   article_service  — slug allocation, cursor feed, partial update, delete
#   user_service     — author profiles
#
# All service functions accept an AsyncSession as their first argument so
# that the router layer controls the transaction boundary via ``get_db``.
# The one exception is ``article_service.create_article``, which commits
# its own row while the slug lock is held.
