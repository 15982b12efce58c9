#!/usr/bin/env python3
"""
Live document detection on a webcam
Usage: python3 realtime_detect.py [--device 0] [--cadence-ms 100]
"""

import argparse
import logging

import cv2

from doc_detection import CaptureVideoSource, DetectionLoop, DetectorConfig, LatestFrameSource, OverlayRenderer


def parse_args():
    parser = argparse.ArgumentParser(description='Live document detection overlay')
    parser.add_argument('--device', default='0', help='Camera index or stream URL')
    parser.add_argument('--cadence-ms', type=int, default=None, help='Delay between detection passes')
    parser.add_argument('--factor', type=float, default=None, help='Downsample factor')
    return parser.parse_args()


def main():
    args = parse_args()
    logging.basicConfig(level=logging.INFO)

    config = DetectorConfig.from_env()
    if args.cadence_ms is not None:
        config = config.replace(cadence_ms=args.cadence_ms)
    if args.factor is not None:
        config = config.replace(downsample_factor=args.factor)

    device = int(args.device) if args.device.isdigit() else args.device
    camera = CaptureVideoSource(device)
    if not camera.is_ready():
        print(f"Cannot open camera {args.device}")
        return

    # The window loop owns the camera; detection samples whatever was shown last
    frames = LatestFrameSource()
    renderer = OverlayRenderer()
    loop = DetectionLoop()
    enabled = config.enabled
    loop.start(frames, config)

    print("Press 'd' to toggle detection, 'q' to quit")
    try:
        while True:
            frame = camera.read()
            if frame is None:
                break
            frames.push(frame)

            cv2.imshow('document detection', renderer.render(frame, loop.cell.get()))

            key = cv2.waitKey(10) & 0xFF
            if key == ord('q'):
                break
            if key == ord('d'):
                enabled = not enabled
                if enabled:
                    loop.start(frames, config)
                else:
                    loop.stop()
                print(f"Detection {'on' if enabled else 'off'}")
    finally:
        loop.stop()
        camera.release()
        cv2.destroyAllWindows()


if __name__ == "__main__":
    main()
