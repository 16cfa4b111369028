"""Service layer.

Layout
------
- ``_shared``: :class:`~idserver.services._shared.base.BaseService`, the
  service error taxonomy and the ports (hexagonal interfaces) implemented
  under :mod:`idserver.infra`.
- ``oauth``: client registry, DTOs and the
  :class:`~idserver.services.oauth.service.AuthorizationFlowService`.
- ``consent``: consent gates (presence-gated, interactive, vacant).

Nothing is re-exported here: the unit-of-work module depends on the error
taxonomy, so importing services eagerly from the package would be circular.
"""
