from qrmenu.errors import BusinessNotFound, StoreError, TransientLoadError
from qrmenu.schemas.menu import BusinessOut
from qrmenu.services.repository import MenuRepository
from qrmenu.util.logger import MenuLogger
from qrmenu.util.slug import make_slug

logger = MenuLogger(__name__)


class TenantResolver:
    """
    Picks the one business a request is about.

    Order: the slug from the public URL, then the authenticated owner's
    business, then the first business (single-tenant deployments). A slug
    that matches nothing is final; it never falls through to another business.
    """

    def __init__(self, repo: MenuRepository):
        self.repo = repo

    def resolve(self, slug: str | None = None, owner_id: str | None = None) -> BusinessOut:
        try:
            if slug:
                business = self.repo.find_business_by_slug(make_slug(slug))
                if not business:
                    logger.warning(f"no business for slug '{slug}'")
                    raise BusinessNotFound(slug)
                return business

            if owner_id:
                business_id = self.repo.owner_business_id(owner_id)
                if business_id:
                    business = self.repo.get_business(business_id)
                    if business:
                        return business
                logger.info(f"owner {owner_id} has no business bound, using default")

            business = self.repo.first_business()
        except StoreError as e:
            raise TransientLoadError("We couldn't reach the restaurant right now. Please try again.") from e

        if not business:
            raise BusinessNotFound(slug)
        return business
