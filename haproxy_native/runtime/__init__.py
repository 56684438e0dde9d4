"""Client for the HAProxy runtime API and parsers for its output."""