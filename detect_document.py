#!/usr/bin/env python3
"""
Detect a document in an image and save an overlay
Usage: python3 detect_document.py <path_to_image> [--display 960x540] [--output out.jpg]
"""

import argparse
import logging
import sys
from pathlib import Path

import cv2

from doc_detection import DetectorConfig, DocumentDetector, OverlayRenderer, crop_hint, to_display


def parse_size(value: str):
    try:
        width, height = (float(v) for v in value.lower().split('x'))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected WIDTHxHEIGHT, got {value!r}")
    return width, height


def parse_args():
    parser = argparse.ArgumentParser(description='Detect the document outline in an image')
    parser.add_argument('image', help='Input image')
    parser.add_argument('-o', '--output', help='Overlay output (default: detected_<name> next to the input)')
    parser.add_argument('--display', type=parse_size, help='Also print corners scaled to WIDTHxHEIGHT')
    parser.add_argument('--factor', type=float, default=None, help='Downsample factor (default from env / 0.5)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser.parse_args()


def main():
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    image_path = Path(args.image)
    if not image_path.exists():
        print(f"Error: Image not found: {image_path}")
        sys.exit(1)

    image = cv2.imread(str(image_path))
    if image is None:
        print(f"Error: Failed to load image: {image_path}")
        sys.exit(1)

    height, width = image.shape[:2]
    print(f"Image dimensions: {width}x{height} px")

    config = DetectorConfig.from_env()
    if args.factor is not None:
        config = config.replace(downsample_factor=args.factor)

    detector = DocumentDetector(config)
    quad = detector.analyze_image(image)

    if quad is None:
        print("✗ Document was not detected!")
        sys.exit(1)

    print(f"✓ Document detected ({quad.quality.value}, confidence {quad.confidence:.2f})")
    names = ["Top-left", "Top-right", "Bottom-right", "Bottom-left"]
    for name, corner in zip(names, quad.corners()):
        print(f"  {name:<13} ({corner.x:.1f}, {corner.y:.1f})")

    hint = crop_hint(quad, (width, height))
    print(f"  Crop hint:    {hint}")

    if args.display:
        shown = to_display(quad, (width, height), args.display)
        print(f"\nCorners at {args.display[0]:g}x{args.display[1]:g}:")
        for name, corner in zip(names, shown.corners()):
            print(f"  {name:<13} ({corner.x:.1f}, {corner.y:.1f})")

    result = OverlayRenderer().render(image, quad)
    output_path = Path(args.output) if args.output else image_path.parent / f"detected_{image_path.name}"
    cv2.imwrite(str(output_path), result)
    print(f"\n✓ Result saved: {output_path}")


if __name__ == "__main__":
    main()
