from sqlmodel import Session, select, col
from database import engine
from apps.catalog.models import MediaItem, MediaGenre, MediaPerson, Person

def find_orphans(session: Session):
    """
    Rows left behind by a media form submission that failed part-way:
    people linked to no media item, and media items without any genre.
    """
    linked_people = select(MediaPerson.person_id)
    people = session.exec(select(Person).where(col(Person.id).not_in(linked_people))).all()

    linked_media = select(MediaGenre.media_id)
    media = session.exec(select(MediaItem).where(col(MediaItem.id).not_in(linked_media))).all()
    return people, media

def check_orphans():
    with Session(engine) as session:
        people, media = find_orphans(session)

        if people:
            print(f"FOUND {len(people)} UNLINKED PEOPLE:")
            for person in people:
                print(f"Person {person.id}: {person.name}")
        if media:
            print(f"FOUND {len(media)} MEDIA ITEMS WITHOUT GENRES:")
            for item in media:
                print(f"Media {item.id}: {item.title}")
        if not people and not media:
            print("No orphans found.")

if __name__ == "__main__":
    check_orphans()
