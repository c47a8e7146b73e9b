"""Artist plausibility check for fuzzy metadata search results.

Hey future me - Spotify's search is FUZZY. Ask for artist:"Radiohead" album:"OK Computer"
and you also get tribute albums, karaoke versions and "Radiohead String Quartet". We keep a
candidate only if one of its credited artists and the query artist contain each other
(case-insensitive substring, either direction).

This is a HEURISTIC and it is wrong in both directions:
- over-accepts: "Air" matches "Airbourne", "Queen" matches "Queens of the Stone Age"
- under-accepts: "Beyoncé" vs "Beyonce", "The The" vs "the the band" variants with
  punctuation differences do not substring-match
Keep it a separate predicate so a smarter matcher can be swapped in without touching
the client.
"""

from collections.abc import Iterable


def is_plausible_artist_match(query_artist: str, candidate_artists: Iterable[str]) -> bool:
    """Check whether any credited artist plausibly matches the query artist.

    Args:
        query_artist: Artist text the user searched for
        candidate_artists: Artist names credited on the search result

    Returns:
        True if at least one name is a substring of the query or vice versa
    """
    query = query_artist.lower()
    for name in candidate_artists:
        candidate = name.lower()
        if not candidate:
            continue
        if candidate in query or query in candidate:
            return True
    return False
