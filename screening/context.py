def render_job_listing(listing) -> str:
    return "\n".join([
        f"Job Title: {listing.title}",
        f"Department: {listing.department}",
        f"Description: {listing.description}",
        f"Requirements: {', '.join(listing.requirements or [])}",
        f"Preferred Skills: {', '.join(listing.preferred_skills or [])}",
    ])


def build_job_context(submission, job_lookup) -> str:
    """Describe the role a resume is evaluated against.

    Uses the referenced job listing when it resolves through
    ``job_lookup.get_job_listing``; otherwise falls back to the
    submission's free-text position.
    """
    listing_id = getattr(submission, "job_listing_id", None)
    if listing_id is not None:
        listing = job_lookup.get_job_listing(listing_id)
        if listing is not None:
            return render_job_listing(listing)
    return submission.position
