import argparse
import json
from pathlib import Path
from typing import List

from .env import load_env, get_max_count

from . import __version__
from .records import ContentRecord, record_from_dict
from .schema import validate_record, validate_record_strict
from .storage import load_corpus, save_corpus, find_record
from .database import init_database, upsert_records, load_records
from .ranker import rank_related
from .listing import sort_posts, neighbors, tag_counts, category_counts
from .feed import export_feed, fetch_feed
from .site_config import ConfigError, load_site_config, enabled_friends
from .figure import wrap_figures
from .logger import get_logger


def _load(args: argparse.Namespace) -> List[ContentRecord]:
    if getattr(args, "db", None):
        db_path = Path(args.db)
        if not db_path.exists():
            raise SystemExit(f"Database not found: {db_path}")
        return load_records(db_path, include_drafts=args.drafts)
    try:
        records = load_corpus(Path(args.store))
    except ValueError as e:
        raise SystemExit(str(e))
    if not args.drafts:
        records = [r for r in records if not r.draft]
    return records


def _find(records: List[ContentRecord], record_id: str) -> ContentRecord:
    try:
        return find_record(records, record_id)
    except KeyError:
        raise SystemExit(f"Post not found: {record_id}")


def _write_json(data, output) -> None:
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        print(f"Wrote {output}")
    else:
        print(text)


def cmd_related(args: argparse.Namespace) -> None:
    records = _load(args)
    reference = _find(records, args.id)
    try:
        max_count = args.max if args.max is not None else get_max_count()
    except ValueError as e:
        raise SystemExit(str(e))
    if max_count < 0:
        raise SystemExit("--max must be >= 0")

    selected = rank_related(reference, records, max_count=max_count, workers=args.workers)
    if not selected:
        print("No related posts.")
        return
    for s in selected:
        if args.explain:
            b = s.breakdown()
            print(
                f"{s.record.id}\t{b['total']:.2f} "
                f"(tags={b['tags']:.2f} title={b['title']:.2f} "
                f"fresh={b['freshness']:.2f} cat={b['category']:.0f})"
            )
        else:
            print(f"{s.record.id}\t{s.record.title}")


def cmd_validate(args: argparse.Namespace) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        post = json.load(f)
    if args.strict:
        _, errors = validate_record_strict(post)
    else:
        errors = validate_record(post)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    print("Valid")


def cmd_list(args: argparse.Namespace) -> None:
    posts = sort_posts(_load(args), include_drafts=args.drafts)
    if not posts:
        print("No posts.")
        return
    print(f"Found {len(posts)} posts:\n")
    for p in posts:
        flags = []
        if p.pinned:
            flags.append("pinned")
        if p.restricted:
            flags.append("restricted")
        if p.draft:
            flags.append("draft")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        print(f"{p.published_at.date().isoformat()}  {p.id}  {p.title}{suffix}")


def cmd_neighbors(args: argparse.Namespace) -> None:
    links = neighbors(_load(args), include_drafts=args.drafts)
    if args.id not in links:
        raise SystemExit(f"Post not found: {args.id}")
    n = links[args.id]
    print(f"Prev: {n.prev_id or '-'}  {n.prev_title or ''}".rstrip())
    print(f"Next: {n.next_id or '-'}  {n.next_title or ''}".rstrip())


def cmd_tags(args: argparse.Namespace) -> None:
    for tag in tag_counts(_load(args), include_drafts=args.drafts):
        print(f"{tag.name}\t{tag.count}")


def cmd_categories(args: argparse.Namespace) -> None:
    for cat in category_counts(_load(args), include_drafts=args.drafts):
        print(f"{cat.name}\t{cat.count}")


def cmd_export_feed(args: argparse.Namespace) -> None:
    _write_json(export_feed(_load(args)), args.output)


def cmd_fetch_feed(args: argparse.Namespace) -> None:
    try:
        records = fetch_feed(args.url)
    except ValueError as e:
        raise SystemExit(str(e))
    if args.output:
        save_corpus(Path(args.output), records)
        print(f"Saved {len(records)} posts to {args.output}")
    else:
        for r in records:
            print(f"{r.id}\t{r.title}")


def cmd_import(args: argparse.Namespace) -> None:
    try:
        records = load_corpus(Path(args.store))
    except ValueError as e:
        raise SystemExit(str(e))
    db_path = Path(args.db)
    init_database(db_path)
    inserted, updated = upsert_records(db_path, records)
    print(f"Done. inserted={inserted} updated={updated}")


def cmd_add(args: argparse.Namespace) -> None:
    input_path = Path(args.input)
    store_path = Path(args.store)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        post = json.load(f)
    errors = validate_record(post)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)

    record = record_from_dict(post)
    try:
        records = load_corpus(store_path)
    except ValueError as e:
        raise SystemExit(str(e))
    status = "new"
    for i, r in enumerate(records):
        if r.id == record.id:
            status = "no-change" if r == record else "updated"
            records[i] = record
            break
    else:
        records.append(record)
    save_corpus(store_path, records)
    print(f"Post: {record.id}")
    print(f"Status: {status}")


def cmd_friends(args: argparse.Namespace) -> None:
    try:
        config = load_site_config(Path(args.config))
    except ConfigError as e:
        raise SystemExit(str(e))
    friends = enabled_friends(list(config.friends))
    if not friends:
        print("No enabled friend links.")
        return
    for f in friends:
        tags = f", {', '.join(f.tags)}" if f.tags else ""
        print(f"{f.weight:>3}  {f.title}  {f.siteurl}{tags}")


def cmd_figure(args: argparse.Namespace) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    html = wrap_figures(input_path.read_text(encoding="utf-8"))
    if args.output:
        Path(args.output).write_text(html, encoding="utf-8")
        print(f"Wrote {args.output}")
    else:
        print(html)


def _add_corpus_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--store", default="data/posts.json", help="Path to JSON corpus (default: data/posts.json)")
    p.add_argument("--db", help="Read posts from this SQLite database instead of --store")
    p.add_argument("--drafts", action="store_true", help="Include draft posts")


def main(argv=None):
    load_env()
    parser = argparse.ArgumentParser(prog="relatedposts", description="Related posts for a blog corpus")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--metrics", action="store_true", help="Log a metrics summary when done")

    subparsers = parser.add_subparsers(dest="command")

    rel = subparsers.add_parser("related", help="Show posts related to one post")
    rel.add_argument("--id", required=True, help="Id of the reference post")
    rel.add_argument("--max", type=int, help="Maximum number of related posts (default: RELATEDPOSTS_MAX_COUNT or 5)")
    rel.add_argument("--explain", action="store_true", help="Print the score breakdown")
    rel.add_argument("--workers", type=int, help="Score candidates on N threads")
    _add_corpus_args(rel)
    rel.set_defaults(func=cmd_related)

    val = subparsers.add_parser("validate", help="Validate a post JSON file")
    val.add_argument("--input", required=True, help="Path to post JSON input")
    val.add_argument("--strict", action="store_true", help="Require a valid timestamp and reject unknown fields")
    val.set_defaults(func=cmd_validate)

    add = subparsers.add_parser("add", help="Add or update a post in the JSON corpus")
    add.add_argument("--input", required=True, help="Path to post JSON input")
    add.add_argument("--store", default="data/posts.json", help="Path to JSON corpus (default: data/posts.json)")
    add.set_defaults(func=cmd_add)

    lst = subparsers.add_parser("list", help="List posts, pinned first then newest first")
    _add_corpus_args(lst)
    lst.set_defaults(func=cmd_list)

    nb = subparsers.add_parser("neighbors", help="Show previous/next post links")
    nb.add_argument("--id", required=True, help="Post id")
    _add_corpus_args(nb)
    nb.set_defaults(func=cmd_neighbors)

    tg = subparsers.add_parser("tags", help="List tags with post counts")
    _add_corpus_args(tg)
    tg.set_defaults(func=cmd_tags)

    ct = subparsers.add_parser("categories", help="List categories with post counts")
    _add_corpus_args(ct)
    ct.set_defaults(func=cmd_categories)

    exf = subparsers.add_parser("export-feed", help="Write the flattened post metadata feed")
    exf.add_argument("--output", help="Output file (default: stdout)")
    _add_corpus_args(exf)
    exf.set_defaults(func=cmd_export_feed)

    ftf = subparsers.add_parser("fetch-feed", help="Fetch a remote post metadata feed")
    ftf.add_argument("--url", required=True, help="Feed URL")
    ftf.add_argument("--output", help="Save fetched posts as a JSON corpus")
    ftf.set_defaults(func=cmd_fetch_feed)

    imp = subparsers.add_parser("import", help="Import a JSON corpus into SQLite")
    imp.add_argument("--store", default="data/posts.json", help="Path to JSON corpus (default: data/posts.json)")
    imp.add_argument("--db", default="data/posts.db", help="Path to SQLite database (default: data/posts.db)")
    imp.set_defaults(func=cmd_import)

    fr = subparsers.add_parser("friends", help="List enabled friend links by weight")
    fr.add_argument("--config", default="data/site.json", help="Path to site config JSON (default: data/site.json)")
    fr.set_defaults(func=cmd_friends)

    fig = subparsers.add_parser("figure", help="Wrap captioned images of an HTML file in <figure>")
    fig.add_argument("--input", required=True, help="HTML input file")
    fig.add_argument("--output", help="Output file (default: stdout)")
    fig.set_defaults(func=cmd_figure)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        if args.metrics:
            get_logger().log_metrics_summary()
        return

    parser.print_help()


if __name__ == "__main__":
    main()
