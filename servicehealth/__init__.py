"""servicehealth: health aggregation and deployment tooling for the test-services VM."""

VERSION = "0.1.0"
