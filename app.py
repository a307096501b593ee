"""
Blackbox Serial Benchmark

Measures how reliably a serial flight-data logger records a high-rate frame
stream:
- Benchmark mode writes a header and a precisely timed frame stream to a
  serial port connected to the logger.
- Analyze mode replays the log captured by the logger and counts the frames
  that survived intact.
"""

import argparse
import sys
import time
from typing import Optional, Sequence

from config import (
    BenchmarkSettings, ConfigurationError, FrameFormat, TransmitError, config
)
from processors import BenchmarkRunner, LoopScheduler, StatisticsReporter, TransmitReport
from protocol import AnalysisResult, FrameAnalyzer, Transmitter
from utils import open_serial, setup_logging

# Setup logging
logger = setup_logging()


def run_benchmark(device: str, settings: BenchmarkSettings, frame_format: Optional[FrameFormat] = None) -> TransmitReport:
    """Generate-and-transmit entry point."""
    settings.validate()
    scheduler = LoopScheduler.from_settings(
        settings, mode=config.SCHEDULER_MODE, spin_window_us=config.SPIN_WINDOW_US
    )

    port = open_serial(device, settings.baud_rate)
    try:
        transmitter = Transmitter(port)
        runner = BenchmarkRunner(transmitter, settings, frame_format, scheduler)
        transmitter.wait_until_ready(config.READY_TOKEN.encode("ascii"), config.READY_TIMEOUT_S)

        report = runner.run(settle_s=config.HEADER_SETTLE_S)
        StatisticsReporter.log_transmission(report)

        # ロガーがSDカードへ書き込み終わるまで待つ
        logger.info("Waiting for the logger to finish...")
        time.sleep(config.FLUSH_WAIT_S)
        return report
    finally:
        port.close()


def analyze_log(path: str, frame_format: Optional[FrameFormat] = None) -> AnalysisResult:
    """Parse-and-report entry point."""
    analyzer = FrameAnalyzer(frame_format, debug=config.DEBUG_FRAME_PARSING)
    result = analyzer.analyze_file(path)
    StatisticsReporter.log_analysis(result)
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Blackbox serial logger benchmark tool.")
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--device", help="Serial port to write the benchmark to")
    mode.add_argument("--analyze", metavar="FILENAME", help="Benchmark log to analyze")
    parser.add_argument(
        "--baud", type=int, default=config.BAUD_RATE,
        help=f"Serial port baud rate (default: {config.BAUD_RATE})"
    )
    parser.add_argument(
        "--looptime", type=int, default=config.LOOP_TIME_US,
        help=f"Simulated looptime in microseconds (default: {config.LOOP_TIME_US})"
    )
    parser.add_argument(
        "--duration", type=int, default=config.DURATION_S,
        help=f"Simulation duration in seconds (default: {config.DURATION_S})"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.analyze:
        try:
            analyze_log(args.analyze)
        except OSError as e:
            logger.error(f"Couldn't open log file '{args.analyze}': {e}")
            return 1
        return 0

    settings = BenchmarkSettings(loop_time_us=args.looptime, duration_s=args.duration, baud_rate=args.baud)
    try:
        run_benchmark(args.device, settings)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except TransmitError as e:
        logger.error(f"Benchmark aborted: {e}")
        return 1

    logger.info("Benchmark done! Now run with --analyze <filename> with the log file from the SD card.")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("Exiting due to KeyboardInterrupt.")
