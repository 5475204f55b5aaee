#!/usr/bin/env python3
"""
CDN Redirect • Sign a single URL
================================

CLI helper to mint a canned-policy CloudFront URL for one content identity,
using the same key loading and signing path as the service.

Examples
--------
    python scripts/sign_url.py 1234deadbeef \
      --url https://d1234abcd.cloudfront.net/ \
      --key-file ./private_key.pkcs8 \
      --key-pair-id K2JCJMDEHXQW5F \
      --ttl 300

Options fall back to CLOUDFRONT_URL, CLOUDFRONT_PRIVATE_KEY_FILE,
CLOUDFRONT_KEY_PAIR_ID and CLOUDFRONT_TTL_SECONDS.
"""

import argparse
import os
import sys
import time
from typing import List, Optional

from cdnredirect.core.config import SignerConfiguration
from cdnredirect.core.exceptions import CdnRedirectError
from cdnredirect.services.keys import read_private_key_file
from cdnredirect.services.signing import build_signed_url


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Sign a CloudFront URL for a content identity")
    ap.add_argument("content_identity", help="Content identity of the stored binary")
    ap.add_argument("--url", default=os.getenv("CLOUDFRONT_URL"), help="CloudFront base URL")
    ap.add_argument("--key-file", default=os.getenv("CLOUDFRONT_PRIVATE_KEY_FILE"), help="PKCS8 PEM key file")
    ap.add_argument("--key-pair-id", default=os.getenv("CLOUDFRONT_KEY_PAIR_ID"), help="CloudFront key pair id")
    ap.add_argument("--ttl", type=int, default=int(os.getenv("CLOUDFRONT_TTL_SECONDS", "60")), help="Seconds valid")
    args = ap.parse_args(argv)

    if not args.url or not args.key_file or not args.key_pair_id:
        print("--url, --key-file and --key-pair-id are required", file=sys.stderr)
        return 2

    try:
        config = SignerConfiguration.create(
            base_url=args.url,
            ttl_seconds=args.ttl,
            min_size_kb=0,
            private_key_pem=read_private_key_file(args.key_file),
            key_pair_id=args.key_pair_id,
        )
        signed = build_signed_url(
            content_identity=args.content_identity,
            ttl_seconds=config.ttl_seconds,
            base_url=config.base_url,
            key_pair_id=config.key_pair_id,
            private_key=config.private_key,
            now=time.time(),
        )
    except CdnRedirectError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(signed.url)
    return 0


if __name__ == "__main__":
    sys.exit(main())
