from sqlalchemy.orm import joinedload

from domaincms.models.domain import Domain
from domaincms.models.page import Page, MAIN_PAGE_SLUG
from domaincms.normalizers.domain import normalize_domain
from domaincms.normalizers.page import normalize_page_summary
from domaincms.utils.countries import country_visibility_clause
from .cache import remember, CACHE_TAGS, CACHE_DURATIONS, domain_tag


def _visible_domains_query(country):
    return (
        Domain.query.options(joinedload(Domain.category))
        .filter(Domain.is_published.is_(True))
        .filter(country_visibility_clause(Domain.target_countries, country))
    )


def get_domains_for_navigation(country):
    """
    Published domains visible in ``country``, each with its category and,
    for hierarchical domains, its visible root pages.

    Two queries regardless of the number of domains.
    """
    def load():
        domains = (
            _visible_domains_query(country)
            .order_by(Domain.order_in_category.asc(), Domain.name.asc())
            .all()
        )

        hierarchical_ids = [d.id for d in domains if d.page_type == "hierarchical"]
        roots_by_domain = {domain_id: [] for domain_id in hierarchical_ids}

        if hierarchical_ids:
            root_pages = (
                Page.query.filter(
                    Page.domain_id.in_(hierarchical_ids),
                    Page.parent_id.is_(None),
                    Page.slug != MAIN_PAGE_SLUG,
                    country_visibility_clause(Page.target_countries, country),
                )
                .order_by(Page.order.asc(), Page.title.asc())
                .all()
            )
            for page in root_pages:
                roots_by_domain[page.domain_id].append(page)

        result = []
        for domain in domains:
            data = normalize_domain(domain)
            data["pages"] = [
                normalize_page_summary(page, base_url=data["url"])
                for page in roots_by_domain.get(domain.id, [])
            ]
            result.append(data)
        return result

    return remember(
        f"domains:navigation:{country}",
        load,
        tags=(CACHE_TAGS["DOMAINS"], CACHE_TAGS["CATEGORIES"], CACHE_TAGS["PAGES"]),
        timeout=CACHE_DURATIONS["MEDIUM"],
    )


def get_domain_by_slug(slug, country):
    """A published domain visible in ``country`` as a dict, or None."""
    def load():
        domain = _visible_domains_query(country).filter(Domain.slug == slug).first()
        return normalize_domain(domain) if domain else None

    return remember(
        f"domain:{slug}:{country}",
        load,
        tags=(CACHE_TAGS["DOMAINS"], domain_tag(slug)),
        timeout=CACHE_DURATIONS["MEDIUM"],
    )
