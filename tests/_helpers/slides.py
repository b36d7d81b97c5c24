"""Slide markup builders for tests."""

from slideplay.infra.surface.surface import SurfaceHost


def make_markup(body: str, title: str = "Slide") -> str:
    return (
        "<!DOCTYPE html>\n"
        "<html><head>"
        f"<title>{title}</title>"
        "<style>:root { --accent: #f60; } body { margin: 0; }</style>"
        "</head><body>"
        f'<div class="slide">{body}</div>'
        "</body></html>"
    )


THREE_GROUP_BODY = (
    '<h1 data-build-id="title">Quarterly review</h1>'
    '<p data-build-id="first">Revenue grew</p>'
    '<p data-build-id="second">Costs fell</p>'
    '<p data-build-id="third">Outlook</p>'
)


def classes_of(surface_host: SurfaceHost, build_id: str) -> list:
    element = surface_host.resolve().find_by_build_id(build_id)
    return list(element.get("class", []))
