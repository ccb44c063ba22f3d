"""Fleet discovery — locating the repositories a run operates on."""
