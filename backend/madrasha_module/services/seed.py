import logging
from datetime import date

from sqlalchemy.orm import Session

from ..models import (
    AcademicYear,
    Announcement,
    Attendance,
    Exam,
    Fee,
    SchoolClass,
    Student,
    Subject,
    Teacher,
    User,
    UserRole,
)
from ..security import hash_password


logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@darulabraar.edu.bd"

DEMO_CREDENTIALS = (
    ("Admin", ADMIN_EMAIL, "admin123"),
    ("Teacher 1", "teacher1@darulabraar.edu.bd", "teacher123"),
    ("Teacher 2", "teacher2@darulabraar.edu.bd", "teacher123"),
    ("Student 1", "student1@darulabraar.edu.bd", "student123"),
    ("Student 2", "student2@darulabraar.edu.bd", "student123"),
    ("Parent 1", "parent1@darulabraar.edu.bd", "parent123"),
)


def _user(email: str, password: str, name: str, role: UserRole) -> User:
    return User(email=email, password_hash=hash_password(password), name=name, role=role, is_active=True)


def seed_demo_data(db: Session) -> bool:
    """Load the demo madrasha. Returns False when the admin account already exists."""
    if db.query(User).filter(User.email == ADMIN_EMAIL).first():
        logger.info("Demo data already present, skipping seed")
        return False

    db.add(_user(ADMIN_EMAIL, "admin123", "System Administrator", UserRole.ADMIN))

    teacher1 = Teacher(
        user=_user("teacher1@darulabraar.edu.bd", "teacher123", "মাওলানা আব্দুল করিম", UserRole.TEACHER),
        name="মাওলানা আব্দুল করিম",
        employee_id="T001",
        designation="প্রধান শিক্ষক",
        qualification="কামিল, এম.এ (ইসলামিক স্টাডিজ)",
        specialization="আরবি ও ইসলামিক স্টাডিজ",
        subjects="আরবি, ফিকহ, হাদিস",
        contact_number="01711111111",
        email="teacher1@darulabraar.edu.bd",
        salary=25000,
    )
    teacher2 = Teacher(
        user=_user("teacher2@darulabraar.edu.bd", "teacher123", "মাওলানা মোহাম্মদ রহিম", UserRole.TEACHER),
        name="মাওলানা মোহাম্মদ রহিম",
        employee_id="T002",
        designation="সহকারী শিক্ষক",
        qualification="ফাজিল, বি.এ",
        specialization="কুরআন ও তাজবিদ",
        subjects="কুরআন, তাজবিদ, বাংলা",
        contact_number="01722222222",
        email="teacher2@darulabraar.edu.bd",
        salary=20000,
    )

    class1 = SchoolClass(
        name="হিফজ বিভাগ - ১ম বর্ষ",
        section="A",
        teacher=teacher1,
        capacity=30,
        description="কুরআন হিফজের প্রথম বর্ষ",
    )
    class2 = SchoolClass(
        name="কিতাব বিভাগ - ৫ম শ্রেণি",
        section="A",
        teacher=teacher2,
        capacity=25,
        description="কিতাব বিভাগের পঞ্চম শ্রেণি",
    )

    parent = _user("parent1@darulabraar.edu.bd", "parent123", "মোহাম্মদ আলী", UserRole.PARENT)
    student1 = Student(
        user=_user("student1@darulabraar.edu.bd", "student123", "মোহাম্মদ আব্দুল্লাহ", UserRole.STUDENT),
        parent=parent,
        name="মোহাম্মদ আব্দুল্লাহ",
        roll_number="H001",
        school_class=class1,
        father_name="মোহাম্মদ আলী",
        mother_name="ফাতিমা খাতুন",
        date_of_birth=date(2010, 5, 15),
        gender="male",
        blood_group="B+",
        contact_number="01733333333",
        email="student1@darulabraar.edu.bd",
        present_address="ঢাকা, বাংলাদেশ",
        permanent_address="কুমিল্লা, বাংলাদেশ",
        guardian_name="মোহাম্মদ আলী",
        guardian_phone="01744444444",
        guardian_relation="father",
    )
    student2 = Student(
        user=_user("student2@darulabraar.edu.bd", "student123", "মোহাম্মদ ইব্রাহিম", UserRole.STUDENT),
        name="মোহাম্মদ ইব্রাহিম",
        roll_number="K001",
        school_class=class2,
        father_name="আব্দুর রহমান",
        mother_name="আয়েশা বেগম",
        date_of_birth=date(2012, 8, 20),
        gender="male",
        blood_group="A+",
        contact_number="01755555555",
        email="student2@darulabraar.edu.bd",
        present_address="চট্টগ্রাম, বাংলাদেশ",
        permanent_address="নোয়াখালী, বাংলাদেশ",
        guardian_name="আব্দুর রহমান",
        guardian_phone="01766666666",
        guardian_relation="father",
    )

    subject1 = Subject(name="কুরআন মজিদ", code="QUR101", school_class=class1, description="কুরআন তিলাওয়াত ও হিফজ")
    subject2 = Subject(name="আরবি ব্যাকরণ", code="ARB201", school_class=class2, description="আরবি ভাষার ব্যাকরণ")

    today = date.today()
    db.add_all(
        [
            teacher1,
            teacher2,
            class1,
            class2,
            student1,
            student2,
            subject1,
            subject2,
            Fee(student=student1, fee_type="tuition", amount=2000, due_date=date(2024, 2, 1), status="pending"),
            Fee(
                student=student2,
                fee_type="tuition",
                amount=1800,
                due_date=date(2024, 2, 1),
                paid_date=date(2024, 1, 25),
                paid_amount=1800,
                status="paid",
                receipt_no="RCP001",
            ),
            Attendance(student=student1, attendance_date=today, status="present"),
            Attendance(student=student2, attendance_date=today, status="present"),
            Exam(
                student=student1,
                subject=subject1,
                exam_type="midterm",
                exam_date=date(2024, 1, 15),
                total_marks=100,
                obtained_marks=85,
                grade="A",
            ),
            Exam(
                student=student2,
                subject=subject2,
                exam_type="midterm",
                exam_date=date(2024, 1, 15),
                total_marks=100,
                obtained_marks=78,
                grade="B+",
            ),
            Announcement(
                title="নতুন শিক্ষাবর্ষ শুরু",
                content=(
                    "আগামী ১ জানুয়ারি থেকে নতুন শিক্ষাবর্ষ শুরু হবে। "
                    "সকল ছাত্রদের নির্ধারিত সময়ে উপস্থিত থাকার জন্য অনুরোধ করা হচ্ছে।"
                ),
                target_role="all",
            ),
            Announcement(
                title="ফি পরিশোধের শেষ তারিখ",
                content=(
                    "এই মাসের ফি পরিশোধের শেষ তারিখ ২৮ তারিখ। "
                    "দেরিতে ফি পরিশোধের জন্য জরিমানা প্রযোজ্য হবে।"
                ),
                target_role="student",
            ),
            AcademicYear(year="2024-2025", start_date=date(2024, 1, 1), end_date=date(2024, 12, 31), is_active=True),
        ]
    )
    db.commit()
    logger.info("Demo data seeded")
    return True
