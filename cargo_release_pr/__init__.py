"""cargo-release-pr: open release pull requests for Cargo crates."""
