"""Financial projection engine for freelancer business plans."""
