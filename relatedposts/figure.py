"""Wrap captioned images in <figure> elements and add referrer policies for hotlink-protected hosts."""

from typing import Iterable

from bs4 import BeautifulSoup

from .normalize import host_matches, url_host

# Image hosts that reject requests carrying a foreign Referer header.
DEFAULT_NO_REFERRER_HOSTS = frozenset({
    "hdslb.com",
    "sinaimg.cn",
    "qpic.cn",
    "qlogo.cn",
})


def should_add_no_referrer(src: str, hosts: Iterable[str] = DEFAULT_NO_REFERRER_HOSTS) -> bool:
    host = url_host(src)
    return bool(host) and host_matches(host, hosts)


def wrap_figures(html: str, no_referrer_hosts: Iterable[str] = DEFAULT_NO_REFERRER_HOSTS) -> str:
    """
    Rewrite <img> elements in an HTML fragment.

    Images with non-blank alt text become
    <center><figure><img alt=""><figcaption>alt</figcaption></figure></center>.
    Images without alt text keep their place and only gain
    referrerpolicy="no-referrer" when their host needs it.
    """
    hosts = frozenset(no_referrer_hosts)
    soup = BeautifulSoup(html, "html.parser")

    for img in soup.find_all("img"):
        if should_add_no_referrer(img.get("src", ""), hosts):
            img["referrerpolicy"] = "no-referrer"

        alt = img.get("alt")
        if not alt or not alt.strip():
            continue

        attrs = dict(img.attrs)
        attrs["alt"] = ""
        center = soup.new_tag("center")
        figure = soup.new_tag("figure")
        figure.append(soup.new_tag("img", attrs=attrs))
        caption = soup.new_tag("figcaption")
        caption.string = alt
        figure.append(caption)
        center.append(figure)
        img.replace_with(center)

    return str(soup)
