"""Remote API access: the resource catalog and the request façade."""

from branchweb.api import resources
from branchweb.api.facade import RequestFacade
from branchweb.api.resources import Destination, Resource

__all__ = ["Destination", "RequestFacade", "Resource", "resources"]
