from rest_framework import serializers
from django.contrib.auth import get_user_model
from .models import Post
from .publication import apply_publication_transition

# --- Setup ---
User = get_user_model()

# --- Helper Serializers ---


class AuthorSerializer(serializers.ModelSerializer):
    """Minimal serializer for displaying the Post author."""

    class Meta:
        model = User
        fields = ("id", "email")
        read_only_fields = fields


class SectionSerializer(serializers.Serializer):
    """One entry of a post's ordered ``sections`` list."""

    heading = serializers.CharField()
    content = serializers.CharField(allow_blank=True, trim_whitespace=False)
    examples = serializers.ListField(
        child=serializers.CharField(allow_blank=True, trim_whitespace=False),
        default=list,
    )


# ------------------------------------
# --- Post Serializers ---
# ------------------------------------


# ----------------- 1. LIST SERIALIZER -----------------
# Used by the public listing (/api/posts/). Sections are left out to keep pages small.
class PostListSerializer(serializers.ModelSerializer):
    author = AuthorSerializer(read_only=True)

    class Meta:
        model = Post
        fields = (
            "id",
            "author",
            "title",
            "introduction",
            "is_published",
            "published_at",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


# ----------------- 2. DETAIL SERIALIZER -----------------
# Everything from the list serializer plus the ordered sections.
class PostDetailSerializer(PostListSerializer):
    sections = SectionSerializer(many=True, read_only=True)

    class Meta(PostListSerializer.Meta):
        fields = PostListSerializer.Meta.fields + ("sections",)
        read_only_fields = fields


# ----------------- 3. WRITE SERIALIZER -----------------
class PostWriteSerializer(serializers.ModelSerializer):
    """
    Used for creating (POST) and updating (PUT/PATCH) a Post.

    'author' is not accepted: it is set from the caller in the view and never
    changes afterwards. 'published_at' is not accepted either; it is derived
    from 'is_published' by apply_publication_transition().
    """

    sections = SectionSerializer(many=True, required=False)
    is_published = serializers.BooleanField(required=False)

    class Meta:
        model = Post
        fields = ("title", "introduction", "sections", "is_published")

    def validate(self, attrs):
        # PUT replaces the post wholesale, sections included.
        if self.instance is not None and not self.partial and "sections" not in attrs:
            raise serializers.ValidationError(
                {"sections": ["This field is required."]}
            )
        return attrs

    def create(self, validated_data):
        is_published = validated_data.pop("is_published", False)
        validated_data["sections"] = self._plain_sections(validated_data.get("sections", []))

        post = Post(**validated_data)
        apply_publication_transition(post, is_published)
        post.save()
        return post

    def update(self, instance, validated_data):
        if "is_published" in validated_data:
            apply_publication_transition(instance, validated_data.pop("is_published"))

        # The sections list is replaced as a whole, never merged.
        if "sections" in validated_data:
            validated_data["sections"] = self._plain_sections(validated_data["sections"])

        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        return instance

    @staticmethod
    def _plain_sections(sections):
        # Store plain dicts in display order
        return [
            {
                "heading": section["heading"],
                "content": section["content"],
                "examples": list(section.get("examples", [])),
            }
            for section in sections
        ]
