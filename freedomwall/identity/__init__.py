"""Best-effort caller identification for dedup and throttling."""
